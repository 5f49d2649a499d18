"""Transaction and change-event primitives over the Django ORM."""

from core.store.transaction import run_in_transaction

__all__ = ["run_in_transaction"]
