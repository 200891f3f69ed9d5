"""
Entrypoint for running the API in development.
Also owns the process-level session cleanup scheduler.
"""
import atexit
import logging
import os
from . import create_app

# Respect APP_ENV for configuration selection (handled in get_config())
app = create_app()

logging.basicConfig(
    level=app.config.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

if __name__ == "__main__":
    debug = bool(os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", True))).lower() in ("1", "true", "yes"))
    if app.config.get("CLEANUP_ENABLED"):
        scheduler = app.extensions["auth_services"].cleanup
        scheduler.start()
        atexit.register(scheduler.stop)

    # Dev-friendly defaults; in production you'd run via a WSGI server (gunicorn/uwsgi)
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_RUN_PORT", "8000"))
    # The reloader would run the scheduler in two processes
    app.run(host=host, port=port, debug=debug, use_reloader=False)
