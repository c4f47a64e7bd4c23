# clinics/urls.py
from rest_framework.routers import SimpleRouter
from .views import ClinicViewSet

router = SimpleRouter()
router.register(r'', ClinicViewSet, basename='clinic')

urlpatterns = router.urls
