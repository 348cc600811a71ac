"""Tests for the request principal."""

import pytest
from django.contrib.auth.models import AnonymousUser

from server.apps.accounts.models import Role
from server.apps.accounts.principal import Principal


class TestPrincipal:
    """Tests for Principal construction and flags."""

    def test_anonymous(self):
        """Test the anonymous principal carries no identity."""
        principal = Principal.anonymous()

        assert principal.user_id is None
        assert principal.is_authenticated is False
        assert principal.is_administrator is False

    @pytest.mark.parametrize('user', [None, AnonymousUser()])
    def test_from_unauthenticated_user(self, user):
        """Test anonymous users map to the anonymous principal."""
        assert Principal.from_user(user) == Principal.anonymous()

    @pytest.mark.django_db
    def test_from_user(self, user):
        """Test a user's id and role are carried over."""
        principal = Principal.from_user(user)

        assert principal == Principal(user_id=user.pk, role=Role.RECRUITER)
        assert principal.is_authenticated is True
        assert principal.is_administrator is False

    @pytest.mark.parametrize('role', [Role.ADMIN, Role.SUPER_ADMIN])
    def test_administrator_roles(self, role):
        """Test admin and super admin count as administrators."""
        assert Principal(user_id=1, role=role).is_administrator is True
