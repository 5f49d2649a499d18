"""Repository for delivery queue state transitions.

Every transition is a conditional ``UPDATE`` so it is atomic without locks:
a claim only succeeds while the item is still claimable, and a worker can
only renew or finalize the claim it made, while nobody has claimed the item
again.
"""

from datetime import datetime, timedelta

from django.db.models import Q
from django.utils import timezone

from core.enums import QueueItemState
from core.models import QueueItem

CLAIM_ORDER = ("-priority", "time", "date_created")


def claimable(now: datetime) -> Q:
    """Pending items that are due, and in-flight items whose lease expired."""
    return Q(state=QueueItemState.PENDING.value, next_attempt_at__lte=now) | Q(
        state=QueueItemState.IN_FLIGHT.value, lease_expires_at__lt=now
    )


class QueueRepository:
    """State transitions of queue items."""

    @staticmethod
    def claim_batch(
        owner: str,
        limit: int,
        lease_seconds: int,
        now: datetime | None = None,
    ) -> list[QueueItem]:
        """Claim up to ``limit`` due items for ``owner``.

        Args:
            owner: Lease owner recorded on the claimed items.
            limit: Maximum number of items to claim.
            lease_seconds: Lease duration.
            now: Claim time, defaults to the current time.

        Returns:
            The claimed items in claim order, with their message and recipient.
        """
        if limit <= 0:
            return []
        now = now or timezone.now()
        lease_expires_at = now + timedelta(seconds=lease_seconds)

        candidates = list(
            QueueItem.objects.filter(claimable(now))
            .order_by(*CLAIM_ORDER)
            .values_list("id", flat=True)[: limit * 2]
        )

        claimed = []
        for item_id in candidates:
            if len(claimed) >= limit:
                break
            updated = QueueItem.objects.filter(claimable(now), pk=item_id).update(
                state=QueueItemState.IN_FLIGHT.value,
                lease_owner=owner,
                lease_expires_at=lease_expires_at,
                date_updated=now,
            )
            if updated:
                claimed.append(item_id)

        if not claimed:
            return []
        return list(
            QueueItem.objects.select_related("message", "message_recipient")
            .filter(pk__in=claimed, lease_owner=owner)
            .order_by(*CLAIM_ORDER)
        )

    @staticmethod
    def _held(item: QueueItem, owner: str):
        # lease_expires_at identifies the claim, so a stale copy of a
        # reclaimed item never matches
        return QueueItem.objects.filter(
            pk=item.pk,
            state=QueueItemState.IN_FLIGHT.value,
            lease_owner=owner,
            lease_expires_at=item.lease_expires_at,
        )

    @staticmethod
    def renew_lease(item: QueueItem, owner: str, lease_seconds: int) -> bool:
        """Extend the lease of a claim still held by ``owner``.

        False when the item was deleted, finalized, or claimed again after
        its lease expired.
        """
        now = timezone.now()
        lease_expires_at = now + timedelta(seconds=lease_seconds)
        updated = QueueRepository._held(item, owner).update(
            lease_expires_at=lease_expires_at, date_updated=now
        )
        if updated:
            item.lease_expires_at = lease_expires_at
            item.date_updated = now
        return updated == 1

    @staticmethod
    def _finalize(item: QueueItem, owner: str, **fields) -> bool:
        now = timezone.now()
        updated = QueueRepository._held(item, owner).update(
            lease_owner=None, lease_expires_at=None, date_updated=now, **fields
        )
        if updated:
            for name, value in fields.items():
                setattr(item, name, value)
            item.lease_owner = None
            item.lease_expires_at = None
            item.date_updated = now
        return updated == 1

    @staticmethod
    def mark_done(item: QueueItem, owner: str, note: str | None = None) -> bool:
        """Finish an item successfully. False if the lease was lost."""
        return QueueRepository._finalize(
            item, owner, state=QueueItemState.DONE.value, note=note
        )

    @staticmethod
    def schedule_retry(
        item: QueueItem,
        owner: str,
        attempts: int,
        next_attempt_at: datetime,
        error: str,
    ) -> bool:
        """Return an item to pending for a later attempt."""
        return QueueRepository._finalize(
            item,
            owner,
            state=QueueItemState.PENDING.value,
            attempts=attempts,
            next_attempt_at=next_attempt_at,
            last_error=error,
        )

    @staticmethod
    def mark_failed(item: QueueItem, owner: str, attempts: int, error: str) -> bool:
        """Give up on an item."""
        return QueueRepository._finalize(
            item,
            owner,
            state=QueueItemState.FAILED.value,
            attempts=attempts,
            last_error=error,
        )

    @staticmethod
    def release(item: QueueItem, owner: str) -> bool:
        """Hand an unprocessed claim back without counting an attempt."""
        return QueueRepository._finalize(item, owner, state=QueueItemState.PENDING.value)

    @staticmethod
    def purge_terminal(older_than: datetime) -> int:
        """Delete done and failed items last touched before ``older_than``."""
        deleted, _ = QueueItem.objects.filter(
            state__in=[state.value for state in QueueItemState.terminal()],
            date_updated__lt=older_than,
        ).delete()
        return deleted
