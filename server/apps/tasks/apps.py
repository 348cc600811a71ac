"""Django app configuration for tasks app."""

from django.apps import AppConfig


class TasksConfig(AppConfig):
    """Configuration for tasks app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.tasks'
    verbose_name = 'Scheduled tasks'
