"""Django project package for the notification dispatch service."""
