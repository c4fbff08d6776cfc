from rest_framework import permissions

from .models import ROLE_ADMIN, ROLE_MEDICAL_OFFICER, ROLE_USER


class IsAdminUser(permissions.BasePermission):
    """
    Permission class to check if the user has admin role
    """
    message = 'Admin access required'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.has_role(ROLE_ADMIN)


class IsMedicalOfficerUser(permissions.BasePermission):
    """
    Permission class for medical officers whose profile an admin has approved
    """
    message = 'Medical officer not found, inactive or pending approval'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if not request.user.has_role(ROLE_MEDICAL_OFFICER):
            return False
        profile = getattr(request.user, 'medical_officer', None)
        return profile is not None and profile.is_approved


class IsEndUser(permissions.BasePermission):
    """
    Permission class for community members signed in through Firebase
    """
    message = 'Only community members can access this endpoint'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.has_role(ROLE_USER)
