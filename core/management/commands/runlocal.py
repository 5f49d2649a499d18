"""Development server for a service that does not own its schema."""

from django.core.management.commands.runserver import Command as RunServer


class Command(RunServer):
    """runserver without migration checks.

    The tables are provisioned outside the service (models are unmanaged),
    so there are no migrations to check and no database is needed to boot.
    """

    help = "Start development server without migration checks"

    def check_migrations(self, *_args, **_kwargs):
        self.stdout.write(
            self.style.WARNING("Skipping migration checks (schema is provisioned externally)")
        )
