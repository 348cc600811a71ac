"""Django admin configuration for recruitment app."""

from typing import Any

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.recruitment.exceptions import WorkflowError
from server.apps.recruitment.logic.workflow import (
    advance_workflow_stage,
    workflow_progress,
)
from server.apps.recruitment.models import (
    Agency,
    BGVVendor,
    Candidate,
    Client,
    Requirement,
)


@admin.action(description='Advance to the next workflow stage')
def advance_workflow(
    modeladmin: admin.ModelAdmin[Any],
    request: HttpRequest,
    queryset: QuerySet[Any],
) -> None:
    """Move each selected record one workflow stage forward.

    Records already at their last stage are reported and left alone.
    """
    advanced = 0
    for entity in queryset:
        try:
            advance_workflow_stage(entity)
        except WorkflowError as exc:
            modeladmin.message_user(request, str(exc), messages.WARNING)
        else:
            advanced += 1
    modeladmin.message_user(request, f'Advanced {advanced} record(s)')


class _CreatedByAdminMixin:
    """Stamp the creating user on records added through the admin."""

    def save_model(
        self,
        request: HttpRequest,
        obj: Any,
        form: Any,
        change: bool,  # noqa: FBT001
    ) -> None:
        """Set created_by for new records before saving."""
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)  # type: ignore[misc]


@admin.register(Candidate)
class CandidateAdmin(_CreatedByAdminMixin, admin.ModelAdmin[Candidate]):
    """Admin interface for Candidate model."""

    list_display = [
        'full_name',
        'email',
        'status',
        'workflow_stage',
        'progress_display',
        'assigned_to',
        'created_at',
    ]

    list_filter = [
        'status',
        'workflow_stage',
        'is_active',
    ]

    search_fields = [
        'first_name',
        'last_name',
        'email',
    ]

    readonly_fields = ['created_by', 'created_at', 'updated_at']
    actions = [advance_workflow]

    def progress_display(self, obj: Candidate) -> str:
        """Display workflow progress as a percentage.

        Args:
            obj: Candidate instance.

        Returns:
            Percentage string.
        """
        return f'{workflow_progress("Candidate", obj.workflow_stage)}%'
    progress_display.short_description = 'Progress'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Candidate]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('assigned_to')


@admin.register(Client)
class ClientAdmin(_CreatedByAdminMixin, admin.ModelAdmin[Client]):
    """Admin interface for Client model."""

    list_display = [
        'company_name',
        'business_type',
        'status',
        'workflow_stage',
        'created_at',
    ]
    list_filter = ['business_type', 'status']
    search_fields = ['company_name']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
    actions = [advance_workflow]


@admin.register(Requirement)
class RequirementAdmin(_CreatedByAdminMixin, admin.ModelAdmin[Requirement]):
    """Admin interface for Requirement model."""

    list_display = [
        'title',
        'client',
        'employment_type',
        'positions',
        'status',
    ]
    list_filter = ['employment_type', 'status']
    search_fields = ['title', 'client__company_name']
    readonly_fields = ['created_by', 'created_at', 'updated_at']


@admin.register(Agency)
class AgencyAdmin(_CreatedByAdminMixin, admin.ModelAdmin[Agency]):
    """Admin interface for Agency model."""

    list_display = ['name', 'status', 'verification_status', 'created_at']
    list_filter = ['status', 'verification_status']
    search_fields = ['name', 'contact_email']
    readonly_fields = ['created_by', 'created_at', 'updated_at']


@admin.register(BGVVendor)
class BGVVendorAdmin(_CreatedByAdminMixin, admin.ModelAdmin[BGVVendor]):
    """Admin interface for BGVVendor model."""

    list_display = ['name', 'status', 'created_at']
    list_filter = ['status']
    search_fields = ['name', 'contact_email']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
