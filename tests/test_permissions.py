"""
Tests for the economy admin permission checks.
"""

from types import SimpleNamespace

import pytest

from services.permissions import has_admin_permission, has_allowlisted_admin


def _interaction(user_id, guild=None, user_perms=None):
    user = SimpleNamespace(id=user_id)
    if user_perms is not None:
        user.guild_permissions = user_perms
    return SimpleNamespace(user=user, guild=guild)


def _guild_with(perms):
    member = SimpleNamespace(guild_permissions=perms)
    return SimpleNamespace(get_member=lambda _uid: member)


class TestAllowlist:
    def test_allowlisted_user(self, monkeypatch):
        monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [101])
        assert has_allowlisted_admin(_interaction(101)) is True
        assert has_admin_permission(_interaction(101)) is True

    def test_empty_allowlist_admits_nobody(self, monkeypatch):
        monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])
        assert has_allowlisted_admin(_interaction(101)) is False


class TestGuildPermissions:
    @pytest.mark.parametrize(
        "administrator,manage_guild,expected",
        [(True, False, True), (False, True, True), (False, False, False)],
    )
    def test_member_permissions(self, monkeypatch, administrator, manage_guild, expected):
        monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])
        perms = SimpleNamespace(administrator=administrator, manage_guild=manage_guild)
        assert has_admin_permission(_interaction(303, guild=_guild_with(perms))) is expected

    def test_falls_back_to_user_permissions(self, monkeypatch):
        monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])
        perms = SimpleNamespace(administrator=False, manage_guild=True)
        guild = SimpleNamespace(get_member=lambda _uid: None)
        assert has_admin_permission(_interaction(404, guild=guild, user_perms=perms)) is True

    def test_direct_message_without_permissions(self, monkeypatch):
        monkeypatch.setattr("services.permissions.ADMIN_USER_IDS", [])
        assert has_admin_permission(_interaction(505)) is False
