"""Fixtures shared by all app tests."""

import pytest
from django.contrib.auth import get_user_model

from server.apps.accounts.models import Role

User = get_user_model()


@pytest.fixture
def make_user(db):
    """Factory creating users with a given role.

    Returns:
        Callable taking a username and an optional role.
    """

    def factory(username: str, role: str = Role.RECRUITER):
        return User.objects.create_user(
            username=username,
            password='testpass123',
            email=f'{username}@example.com',
            role=role,
        )

    return factory


@pytest.fixture
def user(make_user):
    """Create test recruiter.

    Returns:
        User instance for testing.
    """
    return make_user('testuser')


@pytest.fixture
def other_user(make_user):
    """Create second recruiter for isolation tests.

    Returns:
        Second user instance.
    """
    return make_user('otheruser')


@pytest.fixture
def client_user(make_user):
    """Create user with the client role."""
    return make_user('clientuser', Role.CLIENT)


@pytest.fixture
def admin_user(make_user):
    """Create user with the admin role."""
    return make_user('adminuser', Role.ADMIN)


@pytest.fixture
def hr_user(make_user):
    """Create user with the hr role."""
    return make_user('hruser', Role.HR)
