from rest_framework import permissions


class RoleBasedPermissions:
    """
    Role checks shared by the permission classes below.
    """

    @staticmethod
    def has_role(request, allowed_roles):
        """
        Generic role-based permission check.

        Args:
            request: HTTP request object
            allowed_roles (list): List of allowed role names

        Returns:
            bool: True if user has one of the allowed roles
        """
        if not request.user or not request.user.is_authenticated:
            return False

        if not request.user.role:
            return False

        return request.user.role.name in allowed_roles


class IsAdminUser(permissions.BasePermission):
    """
    Restricts access to users with the admin role.
    Used for master data and schedule management.
    """

    def has_permission(self, request, view):
        return RoleBasedPermissions.has_role(request, ["admin"])


class DynamicPermissionMixin:
    """
    Mixin to provide dynamic permission handling based on request method.

    Reads are public; every write needs an admin.
    """

    def get_permissions(self):
        """
        Returns permission classes based on request method.

        Returns:
            list: List of permission classes for the current request method
        """
        if self.request.method in permissions.SAFE_METHODS:
            return [permissions.AllowAny()]
        return [IsAdminUser()]


class AdminOnlyPermissionMixin:
    """
    Mixin to restrict access to admin users only.
    """

    def get_permissions(self):
        """
        Returns admin-only permission classes.

        Returns:
            list: List containing IsAdminUser permission class
        """
        return [IsAdminUser()]
