from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PortfolioItemViewSet, ShowcaseServiceViewSet, TeamMemberViewSet, TestimonialViewSet

router = DefaultRouter()
router.register(r'portfolio', PortfolioItemViewSet, basename='showcase-portfolio')
router.register(r'testimonials', TestimonialViewSet, basename='showcase-testimonial')
router.register(r'services', ShowcaseServiceViewSet, basename='showcase-service')
router.register(r'team', TeamMemberViewSet, basename='showcase-team')

urlpatterns = [
    path('', include(router.urls)),
]

# Custom Actions:
# POST /api/showcase/testimonials/{id}/moderate/   - Set is_approved / is_published
# GET  /api/showcase/testimonials/?public=true     - Approved and published only
