"""Claims of an authenticated caller."""

ADMIN_PERMISSION = "notifications_admin"


class CoreClaims:
    """Identity of the caller, built from a validated token.

    This is not a Django user, just a container for token claims. The
    tenant of every request comes from ``org_id`` and ``app_id``.
    """

    def __init__(
        self,
        org_id: str,
        app_id: str,
        subject: str,
        name: str | None = None,
        admin: bool = False,
        service: bool = False,
        first_party: bool = False,
        anonymous: bool = False,
        internal: bool = False,
        permissions: list[str] | None = None,
    ):
        self.org_id = org_id
        self.app_id = app_id
        self.subject = subject
        self.name = name
        self.admin = admin
        self.service = service
        self.first_party = first_party
        self.anonymous = anonymous
        self.internal = internal
        self.permissions = permissions or []
        self.is_authenticated = True

    @classmethod
    def from_token(cls, payload: dict) -> "CoreClaims":
        """Build claims from a decoded JWT payload."""
        permissions = payload.get("permissions") or ""
        if isinstance(permissions, str):
            permissions = [p.strip() for p in permissions.split(",") if p.strip()]
        return cls(
            org_id=payload.get("org_id", ""),
            app_id=payload.get("app_id", ""),
            subject=payload.get("sub", ""),
            name=payload.get("name"),
            admin=bool(payload.get("admin", False)),
            service=bool(payload.get("service", False)),
            first_party=bool(payload.get("first_party", False)),
            anonymous=bool(payload.get("anonymous", False)),
            permissions=list(permissions),
        )

    @property
    def user_id(self) -> str:
        return self.subject

    @property
    def tenant(self) -> tuple[str, str]:
        return self.org_id, self.app_id

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def roles(self) -> set[str]:
        """Policy subjects this caller acts as."""
        if self.internal:
            return {"internal"}
        if self.service:
            return {"first_party"} if self.first_party else set()
        roles = {"anonymous"} if self.anonymous else {"user"}
        if self.admin or self.has_permission(ADMIN_PERMISSION):
            roles.add("admin")
        return roles

    def __str__(self):
        return f"CoreClaims(sub={self.subject}, org_id={self.org_id}, app_id={self.app_id})"
