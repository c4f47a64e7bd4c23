import jwt
import logging
from django.conf import settings
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)


class JWTAuthenticationMiddleware(MiddlewareMixin):
    """
    Middleware to validate JWT tokens on API paths and set request.user
    """

    # API paths that don't require authentication
    PUBLIC_PATHS = [
        '/api/docs/',
        '/api/schema/',
        '/api/redoc/',
    ]

    REQUIRED_CLAIMS = ['user_id', 'email']

    def process_request(self, request):
        """Process incoming request and validate JWT token"""

        # Only the JSON API is token protected; admin and static stay on sessions
        if not request.path.startswith('/api/'):
            return None

        if any(request.path.startswith(path) for path in self.PUBLIC_PATHS):
            return None

        # Get Authorization header
        auth_header = request.META.get('HTTP_AUTHORIZATION')
        if not auth_header:
            logger.warning(f"Missing Authorization header - Path: {request.path}, Method: {request.method}")
            return JsonResponse(
                {'success': False, 'error': 'Authorization header required'},
                status=401
            )

        # Extract token from "Bearer <token>" format
        try:
            scheme, token = auth_header.split(' ', 1)
        except ValueError:
            logger.warning(f"Malformed Authorization header - Path: {request.path}")
            return JsonResponse(
                {'success': False, 'error': 'Invalid authorization header format'},
                status=401
            )

        if scheme.lower() != 'bearer':
            logger.warning(f"Invalid auth scheme '{scheme}' - Path: {request.path}")
            return JsonResponse(
                {'success': False, 'error': 'Invalid authorization scheme. Use Bearer token'},
                status=401
            )

        secret_key = getattr(settings, 'JWT_SECRET_KEY', None)
        algorithm = getattr(settings, 'JWT_ALGORITHM', 'HS256')
        leeway = getattr(settings, 'JWT_LEEWAY', 30)

        if not secret_key:
            logger.error("JWT_SECRET_KEY not configured")
            return JsonResponse(
                {'success': False, 'error': 'JWT_SECRET_KEY not configured'},
                status=500
            )

        try:
            payload = jwt.decode(
                token,
                secret_key,
                algorithms=[algorithm],
                leeway=leeway  # Tolerate clock skew between servers
            )
        except jwt.ExpiredSignatureError:
            logger.warning(f"Expired JWT token - Path: {request.path}")
            return JsonResponse(
                {'success': False, 'error': 'Token has expired'},
                status=401
            )
        except jwt.InvalidTokenError as e:
            logger.error(f"Invalid JWT token: {str(e)} - Path: {request.path}, Algorithm: {algorithm}")
            return JsonResponse(
                {'success': False, 'error': f'Invalid token: {str(e)}'},
                status=401
            )

        for field in self.REQUIRED_CLAIMS:
            if field not in payload:
                logger.error(
                    f"Missing JWT field '{field}' - Path: {request.path}, "
                    f"Available fields: {list(payload.keys())}"
                )
                return JsonResponse(
                    {'success': False, 'error': f'Missing required field in token: {field}'},
                    status=401
                )

        # Clinic and roles come from the profile store, never from the token
        from apps.clinics.services import resolve_membership
        from .auth_backends import TenantUser

        membership = resolve_membership(payload['user_id'])
        request.user = TenantUser(
            payload,
            clinic_id=membership.clinic_id,
            roles=membership.roles,
            profile_id=membership.profile_id,
        )
        request._cached_user = request.user  # Cache to prevent re-authentication

        logger.debug(
            f"JWT auth successful - Path: {request.path}, User: {request.user.email}, "
            f"Clinic: {request.user.clinic_id}, Roles: {request.user.roles}"
        )
        return None
