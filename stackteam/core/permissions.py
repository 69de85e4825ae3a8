"""
Permission system for role-based access control (RBAC).

Defines team roles, resources, actions and the permission matrix.
Ownership rules (authors editing their own content) are layered on top by
``can_edit_content`` and ``can_delete_content``.
"""

from enum import Enum
from typing import Dict, Optional, Set, Tuple


class TeamRole(str, Enum):
    """Roles for team members"""
    ADMIN = "admin"      # Full control of the team
    MEMBER = "member"    # Standard access


class Resource(str, Enum):
    """Resources that can be accessed"""
    TEAM = "team"
    TEAM_MEMBER = "team_member"
    INVITE = "invite"
    QUESTION = "question"
    ANSWER = "answer"
    COMMENT = "comment"
    VOTE = "vote"
    TAG = "tag"


class Action(str, Enum):
    """Actions that can be performed on resources"""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    INVITE = "invite"
    REMOVE = "remove"
    MANAGE = "manage"
    ACCEPT = "accept"
    MODERATE = "moderate"


_MEMBER_PERMISSIONS: Set[Tuple[Resource, Action]] = {
    (Resource.TEAM, Action.READ),
    (Resource.TEAM_MEMBER, Action.READ),
    (Resource.QUESTION, Action.READ),
    (Resource.QUESTION, Action.CREATE),
    (Resource.ANSWER, Action.READ),
    (Resource.ANSWER, Action.CREATE),
    # Any member may mark an answer as the accepted one
    (Resource.ANSWER, Action.ACCEPT),
    (Resource.COMMENT, Action.READ),
    (Resource.COMMENT, Action.CREATE),
    (Resource.VOTE, Action.READ),
    (Resource.VOTE, Action.CREATE),
    (Resource.TAG, Action.READ),
}

# Permission matrix for team roles
ROLE_PERMISSIONS: Dict[TeamRole, Set[Tuple[Resource, Action]]] = {
    TeamRole.ADMIN: _MEMBER_PERMISSIONS | {
        # Member management
        (Resource.TEAM_MEMBER, Action.INVITE),
        (Resource.TEAM_MEMBER, Action.REMOVE),
        (Resource.TEAM_MEMBER, Action.MANAGE),
        # Invite lifecycle
        (Resource.INVITE, Action.READ),
        (Resource.INVITE, Action.CREATE),
        (Resource.INVITE, Action.DELETE),
        # Moderation of other members' content
        (Resource.QUESTION, Action.MODERATE),
        (Resource.ANSWER, Action.MODERATE),
        (Resource.COMMENT, Action.MODERATE),
    },
    TeamRole.MEMBER: set(_MEMBER_PERMISSIONS),
}


def has_permission(
    role: Optional[TeamRole],
    resource: Resource,
    action: Action,
) -> bool:
    """
    Check if a role has permission to perform an action on a resource.

    Args:
        role: Team role (ADMIN, MEMBER) or None for non-members
        resource: Resource being accessed
        action: Action being performed

    Returns:
        True if permission is granted, False otherwise
    """
    if role is None:
        return False
    return (resource, action) in ROLE_PERMISSIONS.get(TeamRole(role), set())


def can_manage_members(role: Optional[TeamRole]) -> bool:
    return has_permission(role, Resource.TEAM_MEMBER, Action.MANAGE)


def can_edit_content(is_owner: bool) -> bool:
    """Editing is reserved to the author, admins included."""
    return is_owner


def can_delete_content(role: Optional[TeamRole], resource: Resource, is_owner: bool) -> bool:
    """Authors may delete their content; admins may delete anyone's."""
    return is_owner or has_permission(role, resource, Action.MODERATE)


def can_close_question(role: Optional[TeamRole], is_owner: bool) -> bool:
    return is_owner or has_permission(role, Resource.QUESTION, Action.MODERATE)
