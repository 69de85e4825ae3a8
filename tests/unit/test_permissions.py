"""
Unit tests for stackteam/core/permissions.py

Tests RBAC (Role-Based Access Control) system without database.
"""

import pytest

from stackteam.core.permissions import (
    has_permission,
    can_manage_members,
    can_edit_content,
    can_delete_content,
    can_close_question,
    TeamRole,
    Resource,
    Action,
    ROLE_PERMISSIONS,
)


class TestAdminPermissions:
    """Test ADMIN role permissions."""

    def test_admin_can_read_team(self):
        assert has_permission(TeamRole.ADMIN, Resource.TEAM, Action.READ) is True

    def test_admin_can_invite_team_member(self):
        assert has_permission(TeamRole.ADMIN, Resource.TEAM_MEMBER, Action.INVITE) is True

    def test_admin_can_remove_team_member(self):
        assert has_permission(TeamRole.ADMIN, Resource.TEAM_MEMBER, Action.REMOVE) is True

    def test_admin_can_manage_team_member(self):
        assert has_permission(TeamRole.ADMIN, Resource.TEAM_MEMBER, Action.MANAGE) is True

    def test_admin_can_cancel_invite(self):
        assert has_permission(TeamRole.ADMIN, Resource.INVITE, Action.DELETE) is True

    @pytest.mark.parametrize("resource", [Resource.QUESTION, Resource.ANSWER, Resource.COMMENT])
    def test_admin_can_moderate_content(self, resource):
        assert has_permission(TeamRole.ADMIN, resource, Action.MODERATE) is True


class TestMemberPermissions:
    """Test MEMBER role permissions."""

    def test_member_can_read_team(self):
        assert has_permission(TeamRole.MEMBER, Resource.TEAM, Action.READ) is True

    def test_member_can_ask_and_answer(self):
        assert has_permission(TeamRole.MEMBER, Resource.QUESTION, Action.CREATE) is True
        assert has_permission(TeamRole.MEMBER, Resource.ANSWER, Action.CREATE) is True
        assert has_permission(TeamRole.MEMBER, Resource.COMMENT, Action.CREATE) is True

    def test_member_can_vote(self):
        assert has_permission(TeamRole.MEMBER, Resource.VOTE, Action.CREATE) is True

    def test_member_can_accept_answer(self):
        """Any member may accept an answer, not only the asker."""
        assert has_permission(TeamRole.MEMBER, Resource.ANSWER, Action.ACCEPT) is True

    def test_member_cannot_invite(self):
        assert has_permission(TeamRole.MEMBER, Resource.TEAM_MEMBER, Action.INVITE) is False
        assert has_permission(TeamRole.MEMBER, Resource.INVITE, Action.CREATE) is False

    def test_member_cannot_manage_members(self):
        assert has_permission(TeamRole.MEMBER, Resource.TEAM_MEMBER, Action.MANAGE) is False
        assert has_permission(TeamRole.MEMBER, Resource.TEAM_MEMBER, Action.REMOVE) is False

    @pytest.mark.parametrize("resource", [Resource.QUESTION, Resource.ANSWER, Resource.COMMENT])
    def test_member_cannot_moderate(self, resource):
        assert has_permission(TeamRole.MEMBER, resource, Action.MODERATE) is False


class TestNonMember:
    def test_none_role_has_no_permissions(self):
        for resource in Resource:
            for action in Action:
                assert has_permission(None, resource, action) is False

    def test_plain_string_role_is_accepted(self):
        assert has_permission("admin", Resource.TEAM_MEMBER, Action.MANAGE) is True
        assert has_permission("member", Resource.TEAM_MEMBER, Action.MANAGE) is False


class TestPermissionMatrix:
    def test_admin_is_superset_of_member(self):
        assert ROLE_PERMISSIONS[TeamRole.MEMBER] < ROLE_PERMISSIONS[TeamRole.ADMIN]

    def test_can_manage_members(self):
        assert can_manage_members(TeamRole.ADMIN) is True
        assert can_manage_members(TeamRole.MEMBER) is False
        assert can_manage_members(None) is False


class TestOwnershipRules:
    def test_only_author_can_edit(self):
        assert can_edit_content(is_owner=True) is True
        assert can_edit_content(is_owner=False) is False

    def test_author_can_delete_own_content(self):
        assert can_delete_content(TeamRole.MEMBER, Resource.ANSWER, is_owner=True) is True

    def test_member_cannot_delete_others_content(self):
        assert can_delete_content(TeamRole.MEMBER, Resource.ANSWER, is_owner=False) is False

    def test_admin_can_delete_others_content(self):
        assert can_delete_content(TeamRole.ADMIN, Resource.COMMENT, is_owner=False) is True

    def test_close_question(self):
        assert can_close_question(TeamRole.MEMBER, is_owner=True) is True
        assert can_close_question(TeamRole.ADMIN, is_owner=False) is True
        assert can_close_question(TeamRole.MEMBER, is_owner=False) is False
