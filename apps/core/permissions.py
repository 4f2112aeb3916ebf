"""
Role-Based Permissions for SafraReport.

Maps Profile.role to DRF permission classes.

Roles:
- user: readers; may post business reviews
- author: newsroom writers; draft, version and submit articles, comment
- moderator: moderate classifieds and business reviews
- editor: review, approve and publish articles
- admin: full access including destructive operations

Usage:
    from apps.core.permissions import IsEditor

    class MyView(APIView):
        permission_classes = [IsAuthenticated, IsEditor]
"""

from rest_framework.permissions import BasePermission
import logging

logger = logging.getLogger(__name__)


def get_user_role(user):
    """
    Helper function to get user's role.

    Returns None for anonymous users. Superusers are always 'admin'.
    """
    if not user or not user.is_authenticated:
        return None

    if user.is_superuser:
        return 'admin'

    from apps.core.models import Profile
    profile = Profile.objects.filter(user=user).only('role').first()
    return profile.role if profile else 'user'


def has_any_role(user, roles):
    """Check if user holds one of ``roles``."""
    role = get_user_role(user)
    return role is not None and role in roles


def is_admin(user):
    return has_any_role(user, ('admin',))


class RolePermission(BasePermission):
    """Base class for role-based permissions."""

    # Override in subclasses
    allowed_roles = []

    def has_permission(self, request, view):
        """Check if user has required role."""
        if not request.user or not request.user.is_authenticated:
            return False

        if request.user.is_superuser:
            return True

        return get_user_role(request.user) in self.allowed_roles


class IsAuthor(RolePermission):
    """
    Allow access to authors, editors and admins.

    Authors can:
    - Save and restore article versions
    - Submit articles for review
    - Read and write editorial comments
    """
    allowed_roles = ['author', 'editor', 'admin']
    message = "Se requiere rol de autor."


class IsEditor(RolePermission):
    """
    Allow access to editors and admins.

    Editors can:
    - Review pending articles (approve, reject, request changes)
    - Publish approved articles
    """
    allowed_roles = ['editor', 'admin']
    message = "Se requiere rol de editor."


class IsModerator(RolePermission):
    """Moderate classifieds and business reviews."""
    allowed_roles = ['moderator', 'admin']
    message = "Se requiere rol de moderador."


class IsAdmin(RolePermission):
    """
    Allow access to admin users only.

    Admins can:
    - Purge version history
    - Read the audit log
    - Edit or delete anyone's editorial comments
    """
    allowed_roles = ['admin']
    message = "Se requiere rol de administrador."
