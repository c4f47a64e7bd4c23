# clinics/views.py
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from common.context import TenantContext
from common.drf_auth import HasClinicRole

from . import services
from .models import AppRole, Clinic
from .serializers import (
    AssignRoleSerializer, ClinicSerializer, ProfileSerializer,
    TeamMemberSerializer, UserRoleSerializer
)

logger = logging.getLogger(__name__)


class ClinicViewSet(viewsets.ViewSet):
    """
    Current clinic and team management.

    Role changes are restricted to clinic administrators.
    """
    permission_classes = [HasClinicRole]
    action_roles = {
        'assign_role': [AppRole.CLINIC_ADMIN],
        'remove_role': [AppRole.CLINIC_ADMIN],
    }

    @extend_schema(
        summary="Current User Context",
        description="Profile, clinic and roles of the authenticated user",
        tags=['Clinics']
    )
    @action(detail=False, methods=['get'])
    def me(self, request):
        ctx = TenantContext.from_request(request)
        profile = services.current_profile(ctx)
        clinic = Clinic.objects.filter(pk=ctx.clinic_id).first() if ctx.has_clinic else None

        return Response({
            'success': True,
            'data': {
                'user_id': str(ctx.user_id) if ctx.user_id else None,
                'profile': ProfileSerializer(profile).data if profile else None,
                'clinic': ClinicSerializer(clinic).data if clinic else None,
                'roles': sorted(ctx.roles),
            }
        })

    @extend_schema(
        summary="List Team Members",
        description="Clinic profiles with the roles each member holds",
        responses=TeamMemberSerializer(many=True),
        tags=['Clinics - Team']
    )
    @action(detail=False, methods=['get'])
    def team(self, request):
        ctx = TenantContext.from_request(request)
        members = services.team_members(ctx)
        return Response({
            'success': True,
            'count': len(members),
            'data': TeamMemberSerializer(members, many=True).data
        })

    @extend_schema(
        summary="Assign Role",
        request=AssignRoleSerializer,
        responses={201: UserRoleSerializer},
        tags=['Clinics - Team']
    )
    @action(detail=False, methods=['post'], url_path='team/roles')
    def assign_role(self, request):
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ctx = TenantContext.from_request(request)
        user_role = services.assign_role(
            ctx,
            serializer.validated_data['user_id'],
            serializer.validated_data['role'],
        )
        return Response(
            {'success': True, 'data': UserRoleSerializer(user_role).data},
            status=status.HTTP_201_CREATED
        )

    @extend_schema(
        summary="Remove Role",
        tags=['Clinics - Team']
    )
    @action(detail=False, methods=['delete'], url_path=r'team/roles/(?P<role_id>[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})')
    def remove_role(self, request, role_id=None):
        ctx = TenantContext.from_request(request)
        services.remove_role(ctx, role_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
