"""Django admin configuration for tasks app."""

from django.contrib import admin

from server.apps.tasks.models import ScheduledTask


@admin.register(ScheduledTask)
class ScheduledTaskAdmin(admin.ModelAdmin[ScheduledTask]):
    """Admin interface for ScheduledTask model."""

    list_display = [
        'task_type',
        'status',
        'run_after',
        'attempts',
        'max_attempts',
        'completed_at',
    ]

    list_filter = [
        'task_type',
        'status',
    ]

    readonly_fields = [
        'task_type',
        'payload',
        'attempts',
        'last_error',
        'created_at',
        'started_at',
        'completed_at',
    ]
