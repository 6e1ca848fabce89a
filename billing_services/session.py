"""
billing_services.session -- Explicit authentication context.

Responsibility:
    Hold who is acting (user and token) and answer permission questions for
    them.  The context is created and passed explicitly by the caller; there
    is no process-wide current user.

Lifecycle:
    - ``AuthContext.restore(store, resolve_user)`` -- explicit init: read the
      persisted token, resolve the user it belongs to, and forget the token
      when it no longer resolves.
    - ``login(token, user)`` -- persist the token and bind the user.
    - ``logout()`` -- always clears the token and the user.

Architecture position:
    Services layer.  Transport (HTTP login calls, browser storage) is the
    caller's concern; it is reached through the ``TokenStore`` protocol and
    the ``resolve_user`` callable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol

from billing_kernel.exceptions import NotAuthenticatedError, PermissionDeniedError
from billing_kernel.logging_config import LogContext, get_logger
from billing_services import permissions
from billing_services.permissions import Permission, Role

logger = get_logger("services.session")


@dataclass(frozen=True)
class User:
    """The authenticated user, as the backend describes them."""

    id: str
    name: str
    email: str
    role: Role

    def __post_init__(self) -> None:
        if not isinstance(self.role, Role):
            object.__setattr__(self, "role", Role(self.role))


class TokenStore(Protocol):
    """Where the session token is persisted between runs."""

    def load(self) -> str | None: ...

    def save(self, token: str) -> None: ...

    def clear(self) -> None: ...


class InMemoryTokenStore:
    """TokenStore kept in process memory; used by tests and tools."""

    def __init__(self, token: str | None = None):
        self._token = token

    def load(self) -> str | None:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


# Resolves a token to its user.  Raises NotAuthenticatedError (or returns
# None) when the token is no longer valid.
UserResolver = Callable[[str], "User | None"]


class AuthContext:
    """
    The acting user and their permissions.

    Used as a context manager, it binds the user id into ``LogContext`` so
    every log record emitted inside the block carries ``actor_id``.
    """

    def __init__(self, store: TokenStore | None = None):
        self._store: TokenStore = store if store is not None else InMemoryTokenStore()
        self._token: str | None = self._store.load()
        self._user: User | None = None
        self._log_binding: Any = None

    @classmethod
    def restore(cls, store: TokenStore, resolve_user: UserResolver) -> AuthContext:
        """Build a context from the persisted token, if it still resolves."""
        ctx = cls(store)
        if ctx._token is None:
            return ctx

        try:
            user = resolve_user(ctx._token)
        except NotAuthenticatedError:
            user = None

        if user is None:
            logger.warning("session_token_rejected", extra={})
            store.clear()
            ctx._token = None
        else:
            ctx._user = user
            logger.info("session_restored", extra={
                "user_id": user.id,
                "role": user.role.value,
            })
        return ctx

    @classmethod
    def for_user(cls, user: User, token: str = "local") -> AuthContext:
        """Authenticated context for an already-known user."""
        ctx = cls()
        ctx.login(token, user)
        return ctx

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def role(self) -> Role | None:
        return self._user.role if self._user else None

    @property
    def actor_id(self) -> str:
        """Id of the acting user; raises NotAuthenticatedError without one."""
        if self._user is None:
            raise NotAuthenticatedError()
        return self._user.id

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._user is not None

    def login(self, token: str, user: User) -> None:
        self._store.save(token)
        self._token = token
        self._user = user
        logger.info("session_login", extra={
            "user_id": user.id,
            "role": user.role.value,
        })

    def logout(self) -> None:
        user_id = self._user.id if self._user else None
        self._store.clear()
        self._token = None
        self._user = None
        logger.info("session_logout", extra={"user_id": user_id})

    def has_permission(self, permission: Permission | str) -> bool:
        return permissions.role_has_permission(self.role, permission)

    def has_any_permission(self, perms: Iterable[Permission | str]) -> bool:
        return permissions.has_any_permission(self.role, perms)

    def can_edit(self) -> bool:
        return permissions.can_edit(self.role)

    def is_admin(self) -> bool:
        return permissions.is_admin(self.role)

    def require(self, permission: Permission | str) -> None:
        """
        Raises:
            NotAuthenticatedError: no user is bound.
            PermissionDeniedError: the user's role lacks the permission.
        """
        if not self.is_authenticated:
            raise NotAuthenticatedError()
        if not self.has_permission(permission):
            perm = permission.value if isinstance(permission, Permission) else str(permission)
            logger.warning("permission_denied", extra={
                "user_id": self._user.id,
                "role": self._user.role.value,
                "permission": perm,
            })
            raise PermissionDeniedError(self._user.role.value, perm)

    def __enter__(self) -> AuthContext:
        self._log_binding = LogContext.bind(
            actor_id=self._user.id if self._user else None,
        )
        self._log_binding.__enter__()
        return self

    def __exit__(self, *exc: Any) -> None:
        if self._log_binding is not None:
            self._log_binding.__exit__(*exc)
            self._log_binding = None
