"""Database models for recruitment app.

These are the entities uploaded documents can belong to. Only the
fields the back office and document access rules need are modelled.
"""

from typing import Final, final, override

from django.conf import settings
from django.db import models

_NAME_MAX_LENGTH: Final = 255
_STATUS_MAX_LENGTH: Final = 32
_STAGE_MAX_LENGTH: Final = 64
_PHONE_MAX_LENGTH: Final = 32


class _TrackedEntity(models.Model):
    """Common creator and timestamp fields."""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        abstract = True


@final
class Candidate(_TrackedEntity):
    """Job candidate going through onboarding."""

    class Status(models.TextChoices):
        """Pipeline status."""

        NEW = 'New'
        SCREENING = 'Screening'
        SUBMITTED = 'Submitted'
        INTERVIEW = 'Interview'
        SELECTED = 'Selected'
        OFFERED = 'Offered'
        JOINED = 'Joined'
        REJECTED = 'Rejected'
        ON_HOLD = 'On Hold'

    first_name = models.CharField(max_length=_NAME_MAX_LENGTH)
    last_name = models.CharField(max_length=_NAME_MAX_LENGTH, blank=True)
    email = models.EmailField(db_index=True)
    phone = models.CharField(max_length=_PHONE_MAX_LENGTH, blank=True)

    status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=Status.choices,
        default=Status.NEW,
    )
    workflow_stage = models.CharField(
        max_length=_STAGE_MAX_LENGTH,
        default='Personal Details',
    )

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_candidates',
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        """Model metadata."""

        ordering = ['-created_at']
        indexes = [
            models.Index(
                fields=['status', 'workflow_stage'],
                name='candidate_status_stage_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.full_name

    @property
    def full_name(self) -> str:
        """First and last name joined."""
        return f'{self.first_name} {self.last_name}'.strip()

    @property
    def candidate_code(self) -> str:
        """Human-friendly identifier, e.g. CAN000042."""
        return f'CAN{self.pk:06d}'


@final
class Client(_TrackedEntity):
    """Hiring company."""

    class BusinessType(models.TextChoices):
        """Engagement model."""

        CONTRACT = 'Contract'
        PERMANENT = 'Permanent'
        RPO = 'RPO'

    class Status(models.TextChoices):
        """Account status."""

        ACTIVE = 'Active'
        INACTIVE = 'Inactive'

    company_name = models.CharField(max_length=_NAME_MAX_LENGTH)
    business_type = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=BusinessType.choices,
        default=BusinessType.PERMANENT,
    )
    status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    workflow_stage = models.CharField(
        max_length=_STAGE_MAX_LENGTH,
        default='Business Details',
    )

    class Meta:
        """Model metadata."""

        ordering = ['company_name']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.company_name


@final
class Requirement(_TrackedEntity):
    """Open position raised by a client."""

    class EmploymentType(models.TextChoices):
        """Kind of engagement offered."""

        FULL_TIME = 'fullTime', 'Full time'
        CONTRACT = 'contract', 'Contract'
        TEMPORARY = 'temporary', 'Temporary'

    class Status(models.TextChoices):
        """Requirement status."""

        DRAFT = 'Draft'
        ACTIVE = 'Active'
        ON_HOLD = 'On Hold'
        CLOSED = 'Closed'
        CANCELLED = 'Cancelled'

    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name='requirements',
    )
    title = models.CharField(max_length=_NAME_MAX_LENGTH)
    employment_type = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=EmploymentType.choices,
        default=EmploymentType.FULL_TIME,
    )
    positions = models.PositiveIntegerField(default=1)
    status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    class Meta:
        """Model metadata."""

        ordering = ['-created_at']

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.client}: {self.title}'


@final
class Agency(_TrackedEntity):
    """Staffing agency supplying candidates."""

    class Status(models.TextChoices):
        """Partnership status."""

        PENDING = 'Pending'
        ACTIVE = 'Active'
        INACTIVE = 'Inactive'
        SUSPENDED = 'Suspended'
        BLACKLISTED = 'Blacklisted'

    class VerificationStatus(models.TextChoices):
        """Onboarding verification outcome."""

        PENDING = 'Pending'
        VERIFIED = 'Verified'
        REJECTED = 'Rejected'

    name = models.CharField(max_length=_NAME_MAX_LENGTH)
    contact_email = models.EmailField(blank=True)
    status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=Status.choices,
        default=Status.PENDING,
    )
    verification_status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
    )

    class Meta:
        """Model metadata."""

        ordering = ['name']
        verbose_name_plural = 'Agencies'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.name


@final
class BGVVendor(_TrackedEntity):
    """Background verification vendor."""

    class Status(models.TextChoices):
        """Vendor status."""

        ACTIVE = 'Active'
        INACTIVE = 'Inactive'
        SUSPENDED = 'Suspended'

    name = models.CharField(max_length=_NAME_MAX_LENGTH)
    contact_email = models.EmailField(blank=True)
    status = models.CharField(
        max_length=_STATUS_MAX_LENGTH,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    class Meta:
        """Model metadata."""

        ordering = ['name']
        verbose_name = 'BGV vendor'  # type: ignore[mutable-override]
        verbose_name_plural = 'BGV vendors'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.name
