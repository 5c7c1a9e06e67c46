from rest_framework import permissions
from .models import User


class IsStaffOrHigher(permissions.BasePermission):
    """Kitchen staff and admins: order board and status transitions."""

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.role in [User.Role.STAFF, User.Role.ADMIN]
        )


class IsAdminOrHigher(permissions.BasePermission):
    """Money-moving actions (refunds) are admin only."""

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.role == User.Role.ADMIN
        )
