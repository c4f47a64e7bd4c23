from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from common import clock
from common.mixins import TenantViewSetMixin

from . import services
from .models import Appointment
from .scheduler import WeekGrid
from .serializers import (
    AppointmentCreateUpdateSerializer, AppointmentDetailSerializer,
    AppointmentListSerializer, AppointmentStatusSerializer, CalendarQuerySerializer
)


@extend_schema_view(
    list=extend_schema(
        summary="List Appointments",
        description="Appointments ordered by date then start time",
        parameters=[
            OpenApiParameter(name='scheduled_date', type=str, description='Filter by date (YYYY-MM-DD)'),
            OpenApiParameter(name='status', type=str, description='Filter by status'),
            OpenApiParameter(name='patient', type=str, description='Filter by patient ID'),
            OpenApiParameter(name='provider', type=str, description='Filter by provider profile ID'),
        ],
        tags=['Appointments']
    ),
    retrieve=extend_schema(summary="Get Appointment", tags=['Appointments']),
    create=extend_schema(summary="Create Appointment", tags=['Appointments']),
    update=extend_schema(summary="Update Appointment", tags=['Appointments']),
    partial_update=extend_schema(summary="Partial Update Appointment", tags=['Appointments']),
    destroy=extend_schema(summary="Delete Appointment", tags=['Appointments']),
)
class AppointmentViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    """
    Appointment Management

    CRUD plus the week/day calendar grid and status transitions.
    """
    queryset = Appointment.objects.select_related('patient', 'provider')
    filterset_fields = ['scheduled_date', 'status', 'appointment_type', 'patient', 'provider']
    search_fields = ['title', 'patient__first_name', 'patient__last_name']
    ordering_fields = ['scheduled_date', 'start_time', 'created_at']
    ordering = ['scheduled_date', 'start_time']

    def get_serializer_class(self):
        if self.action == 'list':
            return AppointmentListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return AppointmentCreateUpdateSerializer
        return AppointmentDetailSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        appointment = services.create_appointment(self.tenant_context, serializer.validated_data)

        overlaps = services.overlapping_appointments(self.tenant_context, appointment)
        data = AppointmentDetailSerializer(appointment, context=self.get_serializer_context()).data
        data['overlapping_appointments'] = AppointmentListSerializer(overlaps, many=True).data
        return Response(data, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        serializer.instance = services.update_appointment(
            self.tenant_context, serializer.instance.pk, serializer.validated_data
        )

    def perform_destroy(self, instance):
        services.delete_appointment(self.tenant_context, instance.pk)

    def _calendar_date(self, request):
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return query.validated_data.get('date') or clock.today()

    @extend_schema(summary="Today's Appointments", tags=['Appointments'])
    @action(detail=False, methods=['get'])
    def today(self, request):
        appointments = services.today_appointments(self.tenant_context)
        serializer = AppointmentListSerializer(appointments, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        })

    @extend_schema(
        summary="Upcoming Appointments",
        description="Scheduled or confirmed appointments from today on",
        parameters=[OpenApiParameter(name='limit', type=int, description='Maximum rows (default 10)')],
        tags=['Appointments']
    )
    @action(detail=False, methods=['get'])
    def upcoming(self, request):
        try:
            limit = max(1, int(request.query_params.get('limit', 10)))
        except ValueError:
            limit = 10
        appointments = services.upcoming_appointments(self.tenant_context, limit=limit)
        serializer = AppointmentListSerializer(appointments, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        })

    @extend_schema(
        summary="Week Calendar",
        description="Sunday-started week grid of time slots by date",
        parameters=[OpenApiParameter(name='date', type=str, description='Any date in the week (YYYY-MM-DD)')],
        tags=['Appointments - Calendar']
    )
    @action(detail=False, methods=['get'])
    def week(self, request):
        reference_date = self._calendar_date(request)
        appointments = services.week_appointments(self.tenant_context, reference_date)
        grid = WeekGrid.build(appointments, reference_date)
        return Response({
            'success': True,
            'data': grid.serialize(lambda a: AppointmentListSerializer(a).data)
        })

    @extend_schema(
        summary="Day Calendar",
        parameters=[OpenApiParameter(name='date', type=str, description='Date (YYYY-MM-DD), default today')],
        tags=['Appointments - Calendar']
    )
    @action(detail=False, methods=['get'])
    def day(self, request):
        day = self._calendar_date(request)
        appointments = services.list_appointments(self.tenant_context, date=day)
        grid = WeekGrid.day(appointments, day)
        return Response({
            'success': True,
            'data': grid.serialize(lambda a: AppointmentListSerializer(a).data)
        })

    @extend_schema(
        summary="Change Appointment Status",
        request=AppointmentStatusSerializer,
        responses=AppointmentDetailSerializer,
        tags=['Appointments']
    )
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        appointment = self.get_object()
        serializer = AppointmentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        appointment = services.set_status(
            self.tenant_context, appointment.pk, serializer.validated_data['status']
        )
        return Response({
            'success': True,
            'data': AppointmentDetailSerializer(appointment).data
        })

    @extend_schema(
        summary="Overlapping Appointments",
        description="Live appointments of the same patient whose times intersect this one",
        tags=['Appointments']
    )
    @action(detail=True, methods=['get'])
    def overlaps(self, request, pk=None):
        appointment = self.get_object()
        overlaps = services.overlapping_appointments(self.tenant_context, appointment)
        serializer = AppointmentListSerializer(overlaps, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        })
