#!/usr/bin/env python
"""Run the notification service locally.

``python run_local.py`` serves the API; ``python run_local.py queue`` runs
the delivery queue instead.
"""

import os
import sys

from django.core.management import execute_from_command_line


def main():
    """Run the development server, or the queue when asked for it."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "notification_service.settings")
    command = "run_queue" if sys.argv[1:2] == ["queue"] else "runlocal"
    execute_from_command_line([sys.argv[0], command])


if __name__ == "__main__":
    main()
