from rest_framework.permissions import BasePermission


def is_admin_user(user):
    """
    Check if user is an admin user.
    Returns True for superusers and for users whose role is 'admin'.
    """
    if not user or not user.is_authenticated:
        return False
    return user.is_superuser or getattr(user, 'role', '') == 'admin'


def is_staff_member(user):
    """Admins and employees run day-to-day operations"""
    if is_admin_user(user):
        return True
    return bool(user and user.is_authenticated and getattr(user, 'role', '') == 'employee')


class IsStaffMember(BasePermission):
    message = 'Only admin and employee users can access operations.'

    def has_permission(self, request, view):
        return is_staff_member(request.user)


class IsAdminRole(BasePermission):
    message = 'Only Admin users can perform this action.'

    def has_permission(self, request, view):
        return is_admin_user(request.user)
