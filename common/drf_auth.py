"""
Django REST Framework authentication and permission classes for JWT-based ClinicDesk authentication.

The JWT middleware validates the token and sets ``request.user`` to a
TenantUser; the classes here expose that user to DRF and gate views on
clinic membership and clinic roles.
"""

from rest_framework import authentication, permissions
from django.contrib.auth.models import AnonymousUser
import logging

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    DRF authentication class that uses the TenantUser set by JWTAuthenticationMiddleware.
    """

    def authenticate(self, request):
        # Access the underlying Django request (not DRF's wrapped request)
        # to avoid recursion when accessing request.user
        django_request = request._request if hasattr(request, '_request') else request

        user = getattr(django_request, 'user', None)
        if user is not None and not isinstance(user, AnonymousUser):
            return (user, None)

        return None

    def authenticate_header(self, request):
        """
        Return a string to be used as the value of the `WWW-Authenticate`
        header in a `401 Unauthenticated` response.
        """
        return 'Bearer realm="api"'


class IsClinicMember(permissions.BasePermission):
    """
    Allows any authenticated API user.

    Users without a clinic still pass: reads come back empty and writes
    raise TenantRequired from the service layer.
    """

    def has_permission(self, request, view):
        if not request.user or isinstance(request.user, AnonymousUser):
            return False
        return bool(getattr(request.user, 'is_authenticated', False))


class HasClinicRole(IsClinicMember):
    """
    Restricts actions to users holding one of the listed clinic roles.

    Views declare ``action_roles = {'assign_role': ['clinic_admin'], ...}``;
    actions not listed only require clinic membership.
    """
    message = 'You do not have the required clinic role for this action'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False

        action_roles = getattr(view, 'action_roles', {})
        required = action_roles.get(getattr(view, 'action', None))
        if not required:
            return True

        user_roles = set(getattr(request.user, 'roles', []))
        allowed = bool(user_roles.intersection(str(r) for r in required))
        if not allowed:
            logger.warning(
                f"Role check failed - User: {request.user}, Action: {view.action}, "
                f"Required: {list(required)}, Has: {sorted(user_roles)}"
            )
        return allowed
