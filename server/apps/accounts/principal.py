"""The actor behind a request, reduced to what access checks need."""

from dataclasses import dataclass
from typing import Any, Final, Self, final

from server.apps.accounts.models import ADMIN_ROLES

_ANONYMOUS_ROLE: Final = ''


@final
@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated or anonymous caller.

    Attributes:
        user_id: Primary key of the user, None for anonymous callers.
        role: Role of the user, empty for anonymous callers.
    """

    user_id: int | None
    role: str = _ANONYMOUS_ROLE

    @classmethod
    def anonymous(cls) -> Self:
        """Build a principal for an unauthenticated caller."""
        return cls(user_id=None)

    @classmethod
    def from_user(cls, user: Any) -> Self:
        """Build a principal from a Django user (or AnonymousUser).

        Args:
            user: ``request.user`` or a user instance.

        Returns:
            Principal carrying the user's id and role.
        """
        if user is None or not user.is_authenticated:
            return cls.anonymous()
        return cls(user_id=user.pk, role=user.role)

    @property
    def is_authenticated(self) -> bool:
        """Whether the caller is logged in."""
        return self.user_id is not None

    @property
    def is_administrator(self) -> bool:
        """Whether the caller holds an admin role."""
        return self.role in ADMIN_ROLES
