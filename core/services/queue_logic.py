"""Delivery queue: claims pending queue items and pushes them to devices.

One dispatcher thread claims due items in priority order and feeds them to a
fixed pool of worker threads through a bounded channel. The dispatcher wakes
on ``queue_items_added``, on ``notify_push``, on the Redis wake channel that
web processes publish to, and on a poll timer for retries. When the channel
is full it stops claiming until workers catch up.
"""

import os
import queue
import random
import socket
import threading
import uuid
from datetime import datetime, timedelta

from django.conf import settings
from django.db import close_old_connections
from django.utils import timezone

import structlog
from redis.exceptions import RedisError

from core.constants import (
    QUEUE_NOTE_MUTED,
    QUEUE_NOTE_NO_TOKENS,
    QUEUE_NOTE_TOKENS_REMOVED,
)
from core.exceptions import PermanentProviderError, TransientProviderError
from core.logging import bind_worker
from core.models import QueueItem
from core.repositories import QueueRepository
from core.services.push import push_dispatcher
from core.services.registry_service import registry_service
from core.store.events import queue_items_added
from core.store.wakeups import subscribe_queue_wakes

logger = structlog.get_logger(__name__)

PURGE_INTERVAL_SECONDS = 600


def backoff_delay(attempts: int) -> float:
    """Seconds to wait before attempt ``attempts + 1``."""
    delay = min(
        settings.QUEUE_BACKOFF_CAP_SECONDS,
        settings.QUEUE_BACKOFF_BASE_SECONDS * (2 ** (attempts - 1)),
    )
    jitter = settings.QUEUE_BACKOFF_JITTER_SECONDS
    return delay + (random.uniform(0, jitter) if jitter else 0)  # noqa: S311


class DeliveryOutcome:
    """Per-token results of one queue item."""

    def __init__(self):
        self.sent = 0
        self.removed = 0
        self.retryable_error: str | None = None
        self.permanent_error: str | None = None

    @property
    def all_removed(self) -> bool:
        return self.removed > 0 and not (
            self.sent or self.retryable_error or self.permanent_error
        )


class QueueLogic:
    """Dispatcher loop and worker pool of the push delivery queue."""

    def __init__(self, dispatcher=None, registry=None, repository=QueueRepository):
        self.dispatcher = dispatcher or push_dispatcher
        self.registry = registry or registry_service
        self.repository = repository
        self.owner = f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._work: queue.Queue[QueueItem] = queue.Queue(
            maxsize=settings.QUEUE_CHANNEL_CAPACITY
        )
        self._threads: list[threading.Thread] = []
        self._last_purge: datetime | None = None

    # Lifecycle

    def start(self) -> None:
        """Subscribe to store events and start the dispatcher and workers."""
        if self._threads:
            return
        self._stop.clear()
        queue_items_added.connect(self._on_queue_items_added)

        self._threads.append(
            threading.Thread(target=self._dispatch_loop, name="queue-dispatcher", daemon=True)
        )
        if settings.QUEUE_WAKE_CHANNEL:
            self._threads.append(
                threading.Thread(
                    target=self._wake_listen_loop, name="queue-wake-listener", daemon=True
                )
            )
        for index in range(settings.QUEUE_WORKER_POOL_SIZE):
            self._threads.append(
                threading.Thread(
                    target=self._worker_loop,
                    name=f"queue-worker-{index}",
                    daemon=True,
                )
            )
        for thread in self._threads:
            thread.start()

        logger.info(
            "queue_started",
            owner=self.owner,
            workers=settings.QUEUE_WORKER_POOL_SIZE,
            capacity=settings.QUEUE_CHANNEL_CAPACITY,
        )
        self.notify_push()

    def stop(self, timeout: float | None = None) -> None:
        """Stop claiming, let workers finish their items, then unsubscribe.

        Items still waiting in the channel are handed back as pending.
        """
        if timeout is None:
            timeout = settings.QUEUE_LEASE_SECONDS
        logger.info("queue_stopping", owner=self.owner)
        self._stop.set()
        self._wake.set()

        for thread in self._threads:
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("queue_thread_still_running", thread=thread.name)

        while True:
            try:
                item = self._work.get_nowait()
            except queue.Empty:
                break
            self.repository.release(item, self.owner)

        queue_items_added.disconnect(self._on_queue_items_added)
        self._threads = []
        logger.info("queue_stopped", owner=self.owner)

    def notify_push(self) -> None:
        """Wake the dispatcher loop. Multiple calls coalesce into one wake."""
        self._wake.set()

    def _on_queue_items_added(self, sender=None, **_kwargs) -> None:
        self.notify_push()

    def _wake_listen_loop(self) -> None:
        bind_worker("queue-wake-listener")
        while not self._stop.is_set():
            pubsub = None
            try:
                pubsub = subscribe_queue_wakes()
                while not self._stop.is_set():
                    if pubsub.get_message(timeout=settings.QUEUE_POLL_INTERVAL_SECONDS):
                        self.notify_push()
            except RedisError as e:
                logger.warning("queue_wake_listener_failed", error=str(e))
                self._stop.wait(settings.QUEUE_POLL_INTERVAL_SECONDS)
            finally:
                if pubsub is not None:
                    pubsub.close()

    # Dispatcher

    def _dispatch_loop(self) -> None:
        bind_worker("queue-dispatcher")
        while not self._stop.is_set():
            self._wake.wait(settings.QUEUE_POLL_INTERVAL_SECONDS)
            self._wake.clear()
            if self._stop.is_set():
                break
            self.tick()

    def tick(self) -> None:
        """One dispatcher pass: pick up config changes, claim, purge."""
        try:
            self.dispatcher.refresh_configs()
            self._fill_channel()
            self._purge_if_due()
        except Exception:
            logger.exception("queue_dispatch_failed")
        finally:
            close_old_connections()

    def _fill_channel(self) -> None:
        while not self._stop.is_set():
            free = self._work.maxsize - self._work.qsize()
            if free <= 0:
                return
            items = self.claim(min(settings.QUEUE_CLAIM_BATCH_SIZE, free))
            for item in items:
                self._work.put(item)
            if len(items) < settings.QUEUE_CLAIM_BATCH_SIZE:
                return

    def claim(self, limit: int) -> list[QueueItem]:
        """Claim up to ``limit`` due items for this process."""
        items = self.repository.claim_batch(self.owner, limit, settings.QUEUE_LEASE_SECONDS)
        if items:
            logger.debug("queue_items_claimed", count=len(items))
        return items

    def _purge_if_due(self) -> None:
        now = timezone.now()
        if self._last_purge and (now - self._last_purge).total_seconds() < PURGE_INTERVAL_SECONDS:
            return
        self._last_purge = now
        purged = self.repository.purge_terminal(
            now - timedelta(hours=settings.QUEUE_RETENTION_HOURS)
        )
        if purged:
            logger.info("queue_items_purged", count=purged)

    # Workers

    def _worker_loop(self) -> None:
        bind_worker(threading.current_thread().name)
        while not self._stop.is_set():
            try:
                item = self._work.get(timeout=settings.QUEUE_POLL_INTERVAL_SECONDS)
            except queue.Empty:
                continue
            try:
                self.process_item(item)
            except Exception:
                # The item stays in flight until its lease expires
                logger.exception("queue_item_processing_failed", item_id=str(item.pk))
            finally:
                self._work.task_done()
                close_old_connections()
            if self._work.qsize() < self._work.maxsize:
                self.notify_push()

    def run_once(self, limit: int | None = None) -> int:
        """Claim and process due items in the calling thread.

        Returns:
            Number of items processed.
        """
        items = self.claim(limit or settings.QUEUE_CLAIM_BATCH_SIZE)
        for item in items:
            self.process_item(item)
        return len(items)

    def process_item(self, item: QueueItem) -> bool:
        """Deliver one claimed item and finalize it.

        The lease is renewed before anything is sent, so an item that waited
        in the channel past its lease and was claimed again is dropped here.

        Returns:
            False when the result was discarded because the item was deleted
            or its lease was taken over meanwhile.
        """
        log = logger.bind(
            item_id=str(item.pk),
            message_id=item.message_id,
            org_id=item.org_id,
            app_id=item.app_id,
        )

        if not self.repository.renew_lease(item, self.owner, settings.QUEUE_LEASE_SECONDS):
            log.info("queue_item_lease_lost")
            return False

        if item.message_recipient.mute:
            return self._finish(
                log, self.repository.mark_done(item, self.owner, QUEUE_NOTE_MUTED), "muted"
            )

        tokens = self.registry.get_tokens_for_user(
            item.org_id,
            item.app_id,
            item.user_id,
            item.message.recipients_criteria_list,
        )
        if not tokens:
            return self._finish(
                log, self.repository.mark_done(item, self.owner, QUEUE_NOTE_NO_TOKENS), "no_tokens"
            )

        outcome = self._send(log, item, [token.token for token in tokens])

        if outcome.sent:
            finalized = self.repository.mark_done(item, self.owner)
            return self._finish(log, finalized, "delivered", sent=outcome.sent)

        if outcome.retryable_error:
            attempts = item.attempts + 1
            if attempts >= settings.QUEUE_MAX_ATTEMPTS:
                finalized = self.repository.mark_failed(
                    item, self.owner, attempts, outcome.retryable_error
                )
                return self._finish(log, finalized, "failed", attempts=attempts)
            next_attempt_at = timezone.now() + timedelta(seconds=backoff_delay(attempts))
            finalized = self.repository.schedule_retry(
                item, self.owner, attempts, next_attempt_at, outcome.retryable_error
            )
            return self._finish(
                log, finalized, "retry_scheduled", attempts=attempts, next_attempt_at=next_attempt_at
            )

        if outcome.all_removed:
            finalized = self.repository.mark_done(item, self.owner, QUEUE_NOTE_TOKENS_REMOVED)
            return self._finish(log, finalized, "tokens_removed", removed=outcome.removed)

        finalized = self.repository.mark_failed(
            item, self.owner, item.attempts + 1, outcome.permanent_error or "delivery failed"
        )
        return self._finish(log, finalized, "failed")

    def _send(self, log, item: QueueItem, tokens: list[str]) -> DeliveryOutcome:
        outcome = DeliveryOutcome()
        payload = item.payload()
        for token in tokens:
            try:
                self.dispatcher.send_to_token(item.org_id, item.app_id, token, payload)
            except PermanentProviderError as e:
                if e.is_token_error:
                    self.registry.remove_token(item.org_id, item.app_id, item.user_id, token)
                    outcome.removed += 1
                    log.info("push_token_rejected", reason=e.reason.value)
                else:
                    outcome.permanent_error = f"{e.reason.value}: {e}"
                    log.error("push_failed_permanently", reason=e.reason.value, error=str(e))
            except TransientProviderError as e:
                outcome.retryable_error = str(e)
                log.warning("push_failed_transiently", error=str(e))
            except Exception as e:
                outcome.retryable_error = f"unexpected {type(e).__name__}: {e}"
                log.exception("push_failed_unexpectedly")
            else:
                outcome.sent += 1
        return outcome

    @staticmethod
    def _finish(log, finalized: bool, result: str, **context) -> bool:
        if finalized:
            log.info("queue_item_finalized", result=result, **context)
        else:
            log.info("queue_item_result_discarded", result=result)
        return finalized


queue_logic = QueueLogic()
