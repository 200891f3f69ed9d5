import pytest

from tests.helpers import CHROME_WINDOWS, SAFARI_IPHONE
from utils.devices import UNKNOWN_DEVICE, DeviceInfo, describe_device


@pytest.mark.parametrize(
    "user_agent, label",
    [
        (CHROME_WINDOWS, "Chrome on Windows"),
        (SAFARI_IPHONE, "Safari on iOS"),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_5) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.5 Safari/605.1.15",
            "Safari on macOS",
        ),
        (
            "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:127.0) Gecko/20100101 Firefox/127.0",
            "Firefox on Linux",
        ),
        (
            "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/126.0.0.0 Mobile Safari/537.36",
            "Chrome on Android",
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36 Edg/126.0.0.0",
            "Edge on Windows",
        ),
        ("curl/8.5.0", "curl"),
    ],
)
def test_describe_device(user_agent, label):
    assert describe_device(user_agent) == label


@pytest.mark.parametrize("user_agent", [None, "", "something-else/1.0"])
def test_unknown_device(user_agent):
    assert describe_device(user_agent) == UNKNOWN_DEVICE


def test_device_info_label():
    assert DeviceInfo(user_agent=CHROME_WINDOWS, ip_address="10.0.0.1").label == "Chrome on Windows"
