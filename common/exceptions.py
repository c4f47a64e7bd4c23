"""
Domain errors and the DRF exception handler that renders them.

Services raise these plain exceptions; the handler turns them into the
``{"success": false, "error": ...}`` envelope used across the API.
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ClinicDeskError(Exception):
    """Base class for errors raised by the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be processed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class TenantRequired(ClinicDeskError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'No clinic associated'


class RoleAssignmentDenied(ClinicDeskError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Only clinic administrators can manage roles'


class RoleAlreadyAssigned(ClinicDeskError):
    default_message = 'User already has this role'


class InvalidTransition(ClinicDeskError):
    default_message = 'Invalid appointment status transition'


class PaymentRejected(ClinicDeskError):
    default_message = 'Payment rejected'


class StockAdjustmentError(ClinicDeskError):
    default_message = 'Invalid stock adjustment'


def clinicdesk_exception_handler(exc, context):
    """Render domain and store errors; defer everything else to DRF."""
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, ClinicDeskError):
        logger.warning(f"{exc.__class__.__name__}: {exc.message}")
        return Response(
            {'success': False, 'error': exc.message},
            status=exc.status_code
        )

    if isinstance(exc, ObjectDoesNotExist):
        return Response(
            {'success': False, 'error': 'Not found'},
            status=status.HTTP_404_NOT_FOUND
        )

    if isinstance(exc, IntegrityError):
        logger.warning(f"Store rejected write: {exc}")
        return Response(
            {'success': False, 'error': 'The record conflicts with existing data'},
            status=status.HTTP_400_BAD_REQUEST
        )

    return None
