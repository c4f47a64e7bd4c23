from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import PatientAllergyViewSet, PatientMedicationViewSet, PatientViewSet

router = DefaultRouter()
router.register(r'patients', PatientViewSet, basename='patient')
router.register(r'allergies', PatientAllergyViewSet, basename='patient-allergy')
router.register(r'medications', PatientMedicationViewSet, basename='patient-medication')

urlpatterns = [
    path('', include(router.urls)),
]

# Available URLs:
# GET    /api/patients/patients/                          - List active patients
# POST   /api/patients/patients/                          - Create patient
# GET    /api/patients/patients/{id}/                     - Get patient details
# PATCH  /api/patients/patients/{id}/                     - Update patient
# DELETE /api/patients/patients/{id}/                     - Deactivate patient
# GET    /api/patients/patients/{id}/allergies/           - List / POST add allergy
# GET    /api/patients/patients/{id}/medications/         - List active / POST add medication
# GET    /api/patients/patients/{id}/medical-history/     - List / POST add history entry
# DELETE /api/patients/allergies/{id}/                    - Delete allergy
# PATCH  /api/patients/medications/{id}/                  - Update medication
