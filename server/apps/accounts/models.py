"""Database models for accounts app."""

from typing import Final, final, override

from django.contrib.auth.models import AbstractUser
from django.db import models

_ROLE_MAX_LENGTH: Final = 32


class Role(models.TextChoices):
    """Roles a platform user can hold."""

    SUPER_ADMIN = 'super_admin', 'Super admin'
    ADMIN = 'admin', 'Admin'
    HR = 'hr', 'HR'
    TEAM_LEAD = 'team_lead', 'Team lead'
    RECRUITER = 'recruiter', 'Recruiter'
    CLIENT = 'client', 'Client'
    AGENCY = 'agency', 'Agency'
    BGV_VENDOR = 'bgv_vendor', 'BGV vendor'
    FREELANCE_RECRUITER = 'freelance_recruiter', 'Freelance recruiter'


# Roles that bypass document ownership rules
ADMIN_ROLES: Final = frozenset({Role.ADMIN, Role.SUPER_ADMIN})

# Roles allowed to review (verify/reject) uploaded documents
REVIEWER_ROLES: Final = frozenset({Role.ADMIN, Role.SUPER_ADMIN, Role.HR})


@final
class User(AbstractUser):
    """Platform user with a single role."""

    role = models.CharField(
        max_length=_ROLE_MAX_LENGTH,
        choices=Role.choices,
        default=Role.RECRUITER,
        db_index=True,
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'User'  # type: ignore[mutable-override]
        verbose_name_plural = 'Users'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.username} ({self.role})'
