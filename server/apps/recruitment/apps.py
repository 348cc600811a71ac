"""Django app configuration for recruitment app."""

from django.apps import AppConfig


class RecruitmentConfig(AppConfig):
    """Configuration for recruitment app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.recruitment'
    verbose_name = 'Recruitment'
