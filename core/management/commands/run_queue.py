"""Run the push delivery queue until interrupted."""

import signal
import threading

from django.core.management.base import BaseCommand

from core.services.queue_logic import queue_logic


class Command(BaseCommand):
    """Start the queue dispatcher and worker pool.

    SIGINT and SIGTERM stop claiming, wait for in-flight deliveries and exit.
    """

    help = "Run the push delivery queue"

    def handle(self, *args, **options):
        stopped = threading.Event()

        def _shutdown(signum, _frame):
            self.stdout.write(f"Received signal {signum}, shutting down queue")
            stopped.set()

        signal.signal(signal.SIGINT, _shutdown)
        signal.signal(signal.SIGTERM, _shutdown)

        queue_logic.start()
        self.stdout.write(self.style.SUCCESS(f"Queue running as {queue_logic.owner}"))
        stopped.wait()
        queue_logic.stop()
        self.stdout.write(self.style.SUCCESS("Queue stopped"))
