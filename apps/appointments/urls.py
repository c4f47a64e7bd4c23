from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import AppointmentViewSet

router = DefaultRouter()
router.register(r'appointments', AppointmentViewSet, basename='appointment')

urlpatterns = [
    path('', include(router.urls)),
]

# Custom Actions:
# GET    /api/appointments/appointments/today/              - Today's appointments
# GET    /api/appointments/appointments/upcoming/?limit=10  - Upcoming scheduled/confirmed
# GET    /api/appointments/appointments/week/?date=         - Week grid
# GET    /api/appointments/appointments/day/?date=          - Day grid
# POST   /api/appointments/appointments/{id}/status/        - Change status
# GET    /api/appointments/appointments/{id}/overlaps/      - Overlapping appointments
