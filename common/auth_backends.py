"""
Non-database user object carried on authenticated API requests.

The JWT middleware builds one per request from the token claims plus the
caller's clinic profile and role rows.
"""
import uuid


class TenantUser:
    """
    Lightweight user compatible with Django and DRF permission checks.

    Identity comes from the JWT; clinic_id and roles come from the
    ``clinics`` app so every query can be scoped to the caller's clinic.
    """
    is_authenticated = True
    is_anonymous = False
    is_active = True
    is_staff = False
    is_superuser = False

    def __init__(self, payload, clinic_id=None, roles=None, profile_id=None):
        self.user_id = _as_uuid(payload.get('user_id'))
        self.email = payload.get('email', '')
        self.first_name = payload.get('first_name', '')
        self.last_name = payload.get('last_name', '')
        self.clinic_id = _as_uuid(clinic_id)
        self.profile_id = profile_id
        self.roles = list(roles or [])

        # Django expects these on request.user
        self.pk = self.user_id
        self.id = self.user_id
        self.username = self.email

    def __str__(self):
        return self.email or str(self.user_id)

    def get_username(self):
        return self.username

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def has_role(self, role):
        return str(role) in self.roles

    def has_perm(self, perm, obj=None):
        return False

    def has_module_perms(self, app_label):
        return False


def _as_uuid(value):
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
