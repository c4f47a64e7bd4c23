"""
Tenant context passed explicitly into every data-access function.

Views build it once per request from the authenticated TenantUser; services
and tasks receive it as their first argument instead of reading request or
thread-local state.
"""
import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from .exceptions import TenantRequired


@dataclass(frozen=True)
class TenantContext:
    clinic_id: Optional[uuid.UUID]
    user_id: Optional[uuid.UUID] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def has_clinic(self) -> bool:
        return self.clinic_id is not None

    def require_clinic(self) -> uuid.UUID:
        """Return the clinic id or raise when the caller has no clinic."""
        if self.clinic_id is None:
            raise TenantRequired()
        return self.clinic_id

    def has_role(self, role) -> bool:
        return str(role) in self.roles

    @classmethod
    def from_request(cls, request):
        """Build the context from the TenantUser set by the JWT middleware."""
        user = getattr(request, 'user', None)
        return cls(
            clinic_id=getattr(user, 'clinic_id', None),
            user_id=getattr(user, 'user_id', None),
            roles=frozenset(getattr(user, 'roles', ()) or ()),
        )
