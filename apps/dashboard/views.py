# dashboard/views.py
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from common import clock
from common.context import TenantContext

from . import aggregates
from .cache import cached


class DashboardViewSet(viewsets.ViewSet):
    """
    Clinic Dashboard

    Read-only rollups, cached per clinic until the next write to the
    underlying rows.
    """

    @property
    def tenant_context(self):
        return TenantContext.from_request(self.request)

    def _rollup(self, name, compute, *params):
        ctx = self.tenant_context
        if not ctx.has_clinic:
            return compute(ctx)
        return cached(ctx.clinic_id, name, lambda: compute(ctx), *params)

    def _int_param(self, name, default):
        value = self.request.query_params.get(name)
        if value is None:
            return default
        value = int(value)
        if value < 1:
            raise ValueError(name)
        return value

    def _bad_param(self, name):
        return Response(
            {'success': False, 'error': f'{name} must be a positive whole number'},
            status=status.HTTP_400_BAD_REQUEST
        )

    @extend_schema(
        summary="Dashboard Statistics",
        description="Today's appointments and revenue, active patients, outstanding balance, "
                    "today's appointments per status and the low-stock count",
        tags=['Dashboard']
    )
    @action(detail=False, methods=['get'])
    def stats(self, request):
        today = clock.today()
        data = self._rollup('stats', lambda ctx: aggregates.dashboard_stats(ctx, today), today)
        return Response({'success': True, 'data': data})

    @extend_schema(
        summary="Revenue By Day",
        parameters=[OpenApiParameter(name='days', type=int, description='Trailing window in days (default 7)')],
        tags=['Dashboard']
    )
    @action(detail=False, methods=['get'])
    def revenue(self, request):
        try:
            days = self._int_param('days', None)
        except ValueError:
            return self._bad_param('days')

        data = self._rollup(
            'revenue', lambda ctx: aggregates.revenue_by_day(ctx, days), days, clock.today()
        )
        return Response({'success': True, 'count': len(data), 'data': data})

    @extend_schema(
        summary="Revenue By Payment Method",
        parameters=[OpenApiParameter(name='days', type=int, description='Trailing window in days (default 30)')],
        tags=['Dashboard']
    )
    @action(detail=False, methods=['get'], url_path='payment-methods')
    def payment_methods(self, request):
        try:
            days = self._int_param('days', None)
        except ValueError:
            return self._bad_param('days')

        data = self._rollup(
            'methods', lambda ctx: aggregates.revenue_by_method(ctx, days), days, clock.today()
        )
        return Response({'success': True, 'count': len(data), 'data': data})

    @extend_schema(
        summary="Recent Patients",
        parameters=[OpenApiParameter(name='limit', type=int, description='Number of patients (default 5)')],
        tags=['Dashboard']
    )
    @action(detail=False, methods=['get'], url_path='recent-patients')
    def recent_patients(self, request):
        try:
            limit = self._int_param('limit', 5)
        except ValueError:
            return self._bad_param('limit')

        data = self._rollup('recent_patients', lambda ctx: aggregates.recent_patients(ctx, limit), limit)
        return Response({'success': True, 'count': len(data), 'data': data})
