from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from common.mixins import TenantViewSetMixin

from . import services
from .models import PortfolioItem, ShowcaseService, TeamMember, Testimonial
from .serializers import (
    PortfolioItemSerializer, ShowcaseServiceSerializer, TeamMemberSerializer,
    TestimonialModerationSerializer, TestimonialSerializer
)


def _flag(request, name):
    return request.query_params.get(name, '').lower() in ('1', 'true')


@extend_schema_view(
    list=extend_schema(summary="List Portfolio Items", description="Ordered by display order", tags=['Showcase']),
    retrieve=extend_schema(summary="Get Portfolio Item", tags=['Showcase']),
    create=extend_schema(summary="Create Portfolio Item", tags=['Showcase']),
    update=extend_schema(summary="Update Portfolio Item", tags=['Showcase']),
    partial_update=extend_schema(summary="Partial Update Portfolio Item", tags=['Showcase']),
    destroy=extend_schema(summary="Delete Portfolio Item", tags=['Showcase']),
)
class PortfolioItemViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    queryset = PortfolioItem.objects.all()
    serializer_class = PortfolioItemSerializer
    filterset_fields = ['category', 'is_published']
    ordering = ['display_order', 'created_at']

    def perform_create(self, serializer):
        serializer.instance = services.create_portfolio_item(self.tenant_context, serializer.validated_data)


@extend_schema_view(
    list=extend_schema(
        summary="List Testimonials",
        description="Newest first",
        parameters=[OpenApiParameter(name='public', type=bool, description='Only approved and published')],
        tags=['Showcase']
    ),
    retrieve=extend_schema(summary="Get Testimonial", tags=['Showcase']),
    create=extend_schema(summary="Create Testimonial", tags=['Showcase']),
    update=extend_schema(summary="Update Testimonial", tags=['Showcase']),
    partial_update=extend_schema(summary="Partial Update Testimonial", tags=['Showcase']),
    destroy=extend_schema(summary="Delete Testimonial", tags=['Showcase']),
)
class TestimonialViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    queryset = Testimonial.objects.all()
    serializer_class = TestimonialSerializer
    filterset_fields = ['is_approved', 'is_published', 'rating']
    ordering = ['-created_at']

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list' and _flag(self.request, 'public'):
            queryset = queryset.filter(is_approved=True, is_published=True)
        return queryset

    @extend_schema(
        summary="Moderate Testimonial",
        description="Toggle the approval and/or publishing flags",
        request=TestimonialModerationSerializer,
        responses=TestimonialSerializer,
        tags=['Showcase']
    )
    @action(detail=True, methods=['post'])
    def moderate(self, request, pk=None):
        testimonial = self.get_object()
        serializer = TestimonialModerationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        testimonial = services.moderate_testimonial(
            self.tenant_context, testimonial.pk, **serializer.validated_data
        )
        return Response({
            'success': True,
            'data': TestimonialSerializer(testimonial).data
        })


@extend_schema_view(
    list=extend_schema(
        summary="List Services",
        parameters=[OpenApiParameter(name='include_inactive', type=bool, description='Include hidden services')],
        tags=['Showcase']
    ),
    retrieve=extend_schema(summary="Get Service", tags=['Showcase']),
    create=extend_schema(summary="Create Service", tags=['Showcase']),
    update=extend_schema(summary="Update Service", tags=['Showcase']),
    partial_update=extend_schema(summary="Partial Update Service", tags=['Showcase']),
    destroy=extend_schema(summary="Delete Service", tags=['Showcase']),
)
class ShowcaseServiceViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    queryset = ShowcaseService.objects.all()
    serializer_class = ShowcaseServiceSerializer
    search_fields = ['name']
    ordering = ['display_order', 'name']

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list' and not _flag(self.request, 'include_inactive'):
            queryset = queryset.filter(is_active=True)
        return queryset


@extend_schema_view(
    list=extend_schema(summary="List Team Members", description="Active members by display order", tags=['Showcase']),
    retrieve=extend_schema(summary="Get Team Member", tags=['Showcase']),
    create=extend_schema(summary="Create Team Member", tags=['Showcase']),
    update=extend_schema(summary="Update Team Member", tags=['Showcase']),
    partial_update=extend_schema(summary="Partial Update Team Member", tags=['Showcase']),
    destroy=extend_schema(summary="Delete Team Member", tags=['Showcase']),
)
class TeamMemberViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    queryset = TeamMember.objects.all()
    serializer_class = TeamMemberSerializer
    ordering = ['display_order', 'name']

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list':
            queryset = queryset.filter(is_active=True)
        return queryset

    def perform_create(self, serializer):
        serializer.instance = services.create_team_member(self.tenant_context, serializer.validated_data)
