"""
Best-effort "browser on OS" labels for the session list.
The label is display-only; nothing trusts it.
"""
from __future__ import annotations

from dataclasses import dataclass

UNKNOWN_DEVICE = "Unknown device"

# Order matters: Edge and Opera also announce Chrome, Chrome also announces Safari
_BROWSERS = (
    ("Edg/", "Edge"),
    ("Edge/", "Edge"),
    ("OPR/", "Opera"),
    ("Opera", "Opera"),
    ("SamsungBrowser", "Samsung Internet"),
    ("Firefox/", "Firefox"),
    ("FxiOS", "Firefox"),
    ("CriOS", "Chrome"),
    ("Chrome/", "Chrome"),
    ("Safari/", "Safari"),
    ("curl/", "curl"),
    ("PostmanRuntime", "Postman"),
)

_SYSTEMS = (
    ("iPhone", "iOS"),
    ("iPad", "iPadOS"),
    ("Android", "Android"),
    ("Windows", "Windows"),
    ("Mac OS X", "macOS"),
    ("Macintosh", "macOS"),
    ("CrOS", "ChromeOS"),
    ("Linux", "Linux"),
)


@dataclass(frozen=True)
class DeviceInfo:
    user_agent: str | None = None
    ip_address: str | None = None

    @property
    def label(self) -> str:
        return describe_device(self.user_agent)


def _first_match(user_agent: str, table) -> str | None:
    for needle, name in table:
        if needle in user_agent:
            return name
    return None


def describe_device(user_agent: str | None) -> str:
    if not user_agent:
        return UNKNOWN_DEVICE
    browser = _first_match(user_agent, _BROWSERS)
    system = _first_match(user_agent, _SYSTEMS)
    if browser and system:
        return f"{browser} on {system}"
    return browser or system or UNKNOWN_DEVICE
