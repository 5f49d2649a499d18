"""Production server startup script for the notification dispatch service.

Serves the HTTP API with Gunicorn. The delivery queue runs in its own
process through ``manage.py run_queue``.
"""

import os
import sys

from gunicorn.app.wsgiapp import run


def gunicorn_argv(environ=None) -> list[str]:
    """Gunicorn command line built from ``PORT``, ``WEB_WORKERS``, ``WEB_THREADS``."""
    environ = os.environ if environ is None else environ
    return [
        "gunicorn",
        "notification_service.wsgi:application",
        "--bind",
        f"0.0.0.0:{environ.get('PORT', '80')}",
        "--workers",
        environ.get("WEB_WORKERS", "4"),
        "--threads",
        environ.get("WEB_THREADS", "2"),
        # Longer than the push provider timeout
        "--timeout",
        environ.get("WEB_TIMEOUT", "150"),
        "--access-logfile",
        "-",
        "--error-logfile",
        "-",
    ]


def main():
    """Start the notification service using Gunicorn."""
    sys.argv = gunicorn_argv()
    run()


if __name__ == "__main__":
    main()
