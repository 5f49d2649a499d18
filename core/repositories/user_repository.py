"""Repository for user, token and subscription queries."""

from collections.abc import Iterable

from django.db.models import Q, QuerySet

from core.models import AppPlatform, AppVersion, FirebaseToken, User, UserTopic

CRITERIA_FIELDS = ("app_platform", "app_version")


def criteria_filter(criteria_list: Iterable[dict]) -> Q | None:
    """Build a token filter matching any of the criteria.

    Every non-null field of a criterion must match. Criteria with no fields
    set are dropped, so a list made only of empty criteria matches nothing.

    Returns:
        The combined filter, or None when no criterion can match.
    """
    combined = Q()
    usable = False
    for criterion in criteria_list:
        conditions = {
            field: criterion.get(field)
            for field in CRITERIA_FIELDS
            if criterion.get(field) is not None
        }
        if not conditions:
            continue
        combined |= Q(**conditions)
        usable = True
    return combined if usable else None


def _unique_in_order(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


class UserRepository:
    """Queries over users and the token and topic rows they own."""

    @staticmethod
    def find_user(org_id: str, app_id: str, user_id: str) -> User | None:
        """Look up a user within a tenant."""
        return User.objects.filter(org_id=org_id, app_id=app_id, user_id=user_id).first()

    @staticmethod
    def find_user_by_token(org_id: str, app_id: str, token: str) -> User | None:
        """Look up the user owning a token within a tenant."""
        return (
            User.objects.filter(
                org_id=org_id, app_id=app_id, firebase_tokens__token=token
            )
            .distinct()
            .first()
        )

    @staticmethod
    def find_token(org_id: str, app_id: str, token: str) -> FirebaseToken | None:
        """Look up a token row with its owner."""
        return (
            FirebaseToken.objects.select_related("user")
            .filter(org_id=org_id, app_id=app_id, token=token)
            .first()
        )

    @staticmethod
    def get_or_create_user(org_id: str, app_id: str, user_id: str) -> User:
        """Fetch a user, creating an empty one when missing."""
        user, _created = User.objects.get_or_create(
            org_id=org_id, app_id=app_id, user_id=user_id
        )
        return user

    @staticmethod
    def user_ids_by_topics(org_id: str, app_id: str, topics: list[str]) -> list[str]:
        """User IDs subscribed to any of the topics, in subscription order."""
        if not topics:
            return []
        rows = (
            UserTopic.objects.filter(
                user__org_id=org_id, user__app_id=app_id, topic__in=topics
            )
            .order_by("date_created", "id")
            .values_list("user__user_id", flat=True)
        )
        return _unique_in_order(rows)

    @staticmethod
    def user_ids_by_criteria(
        org_id: str, app_id: str, criteria_list: list[dict]
    ) -> list[str]:
        """User IDs owning at least one token that matches any criterion."""
        token_filter = criteria_filter(criteria_list)
        if token_filter is None:
            return []
        rows = (
            FirebaseToken.objects.filter(org_id=org_id, app_id=app_id)
            .filter(token_filter)
            .order_by("date_created", "id")
            .values_list("user__user_id", flat=True)
        )
        return _unique_in_order(rows)

    @staticmethod
    def deliverable_tokens(
        org_id: str,
        app_id: str,
        user_id: str,
        criteria_list: list[dict] | None = None,
    ) -> QuerySet[FirebaseToken] | list[FirebaseToken]:
        """Tokens a push may be sent to for a user.

        Users with notifications disabled have none. When criteria are given
        only matching tokens are returned.
        """
        tokens = FirebaseToken.objects.filter(
            org_id=org_id,
            app_id=app_id,
            user__user_id=user_id,
            user__notifications_disabled=False,
        ).order_by("date_created", "id")
        if criteria_list:
            token_filter = criteria_filter(criteria_list)
            if token_filter is None:
                return []
            tokens = tokens.filter(token_filter)
        return tokens

    @staticmethod
    def record_app_release(
        org_id: str, app_id: str, app_version: str | None, app_platform: str | None
    ) -> None:
        """Remember the app version and platform reported by a token."""
        if app_version:
            AppVersion.objects.get_or_create(
                org_id=org_id, app_id=app_id, name=app_version
            )
        if app_platform:
            AppPlatform.objects.get_or_create(
                org_id=org_id, app_id=app_id, name=app_platform
            )
