from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from common.mixins import TenantViewSetMixin

from . import services
from .models import Patient, PatientAllergy, PatientMedication
from .serializers import (
    PatientAllergySerializer, PatientCreateUpdateSerializer, PatientDetailSerializer,
    PatientListSerializer, PatientMedicalHistorySerializer, PatientMedicationSerializer
)


@extend_schema_view(
    list=extend_schema(
        summary="List Patients",
        description="Active patients of the clinic ordered by last name",
        parameters=[
            OpenApiParameter(name='include_inactive', type=bool, description='Include deactivated patients'),
            OpenApiParameter(name='search', type=str, description='Search by name, phone or email'),
        ],
        tags=['Patients']
    ),
    retrieve=extend_schema(summary="Get Patient", tags=['Patients']),
    create=extend_schema(summary="Create Patient", tags=['Patients']),
    update=extend_schema(summary="Update Patient", tags=['Patients']),
    partial_update=extend_schema(summary="Partial Update Patient", tags=['Patients']),
    destroy=extend_schema(
        summary="Deactivate Patient",
        description="Soft delete: the patient is marked inactive",
        tags=['Patients']
    ),
)
class PatientViewSet(TenantViewSetMixin, viewsets.ModelViewSet):
    """
    Patient Management

    Patients are soft-deleted; allergies, medications and medical history
    are nested under each patient.
    """
    queryset = Patient.objects.all()
    filterset_fields = ['gender', 'blood_type', 'city']
    search_fields = ['first_name', 'last_name', 'phone', 'email']
    ordering_fields = ['last_name', 'first_name', 'created_at']
    ordering = ['last_name', 'first_name']

    def get_serializer_class(self):
        if self.action == 'list':
            return PatientListSerializer
        elif self.action in ['create', 'update', 'partial_update']:
            return PatientCreateUpdateSerializer
        return PatientDetailSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        include_inactive = self.request.query_params.get('include_inactive', '').lower() in ('1', 'true')
        if self.action == 'list' and not include_inactive:
            queryset = queryset.filter(is_active=True)
        return queryset

    def perform_create(self, serializer):
        serializer.instance = services.create_patient(self.tenant_context, serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_patient(
            self.tenant_context, serializer.instance.pk, serializer.validated_data
        )

    def destroy(self, request, *args, **kwargs):
        patient = self.get_object()
        services.deactivate_patient(self.tenant_context, patient.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Patient Allergies",
        request=PatientAllergySerializer,
        responses=PatientAllergySerializer(many=True),
        tags=['Patients - Clinical']
    )
    @action(detail=True, methods=['get', 'post'])
    def allergies(self, request, pk=None):
        patient = self.get_object()
        if request.method == 'POST':
            serializer = PatientAllergySerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            allergy = services.add_allergy(self.tenant_context, patient.pk, serializer.validated_data)
            return Response(PatientAllergySerializer(allergy).data, status=status.HTTP_201_CREATED)

        allergies = services.list_allergies(self.tenant_context, patient.pk)
        return Response(PatientAllergySerializer(allergies, many=True).data)

    @extend_schema(
        summary="Patient Medications",
        description="Active medications; POST adds one",
        request=PatientMedicationSerializer,
        responses=PatientMedicationSerializer(many=True),
        tags=['Patients - Clinical']
    )
    @action(detail=True, methods=['get', 'post'])
    def medications(self, request, pk=None):
        patient = self.get_object()
        if request.method == 'POST':
            serializer = PatientMedicationSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            medication = services.add_medication(self.tenant_context, patient.pk, serializer.validated_data)
            return Response(PatientMedicationSerializer(medication).data, status=status.HTTP_201_CREATED)

        medications = services.list_medications(self.tenant_context, patient.pk)
        return Response(PatientMedicationSerializer(medications, many=True).data)

    @extend_schema(
        summary="Patient Medical History",
        description="History entries newest first; POST adds one",
        request=PatientMedicalHistorySerializer,
        responses=PatientMedicalHistorySerializer(many=True),
        tags=['Patients - Clinical']
    )
    @action(detail=True, methods=['get', 'post'], url_path='medical-history')
    def medical_history(self, request, pk=None):
        patient = self.get_object()
        if request.method == 'POST':
            serializer = PatientMedicalHistorySerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            entry = services.add_medical_history(self.tenant_context, patient.pk, serializer.validated_data)
            return Response(PatientMedicalHistorySerializer(entry).data, status=status.HTTP_201_CREATED)

        history = services.list_medical_history(self.tenant_context, patient.pk)
        return Response(PatientMedicalHistorySerializer(history, many=True).data)


@extend_schema_view(
    destroy=extend_schema(summary="Delete Allergy", tags=['Patients - Clinical']),
)
class PatientAllergyViewSet(TenantViewSetMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    queryset = PatientAllergy.objects.all()
    serializer_class = PatientAllergySerializer

    def perform_destroy(self, instance):
        services.delete_allergy(self.tenant_context, instance.pk)


@extend_schema_view(
    update=extend_schema(summary="Update Medication", tags=['Patients - Clinical']),
    partial_update=extend_schema(summary="Partial Update Medication", tags=['Patients - Clinical']),
)
class PatientMedicationViewSet(TenantViewSetMixin, mixins.UpdateModelMixin, viewsets.GenericViewSet):
    queryset = PatientMedication.objects.all()
    serializer_class = PatientMedicationSerializer

    def perform_update(self, serializer):
        serializer.instance = services.update_medication(
            self.tenant_context, serializer.instance.pk, serializer.validated_data
        )
