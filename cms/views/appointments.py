"""
Appointment requests: public submission and admin follow-up.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..errors import RecordNotFound
from ..models import AppointmentRequest
from ..permissions import IsContentEditor
from ..serializers.appointments import AppointmentRequestSerializer, AppointmentStatusSerializer
from ..services.audit import log_action
from ..throttling import AppointmentThrottle

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AppointmentThrottle])
def create_appointment(request):
    """Store a consultation request from the booking form.

    Accepts the English field names or the form's Portuguese keys
    (``nome``, ``telefone``, ``tipoConsulta``, ``preferenciaData``,
    ``preferenciaHora``, ``mensagem``).
    """
    serializer = AppointmentRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    appointment = serializer.save()
    logger.info("appointment request id=%s type=%s", appointment.pk, appointment.consultation_type)
    return Response({'ok': True, 'id': appointment.pk}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsContentEditor])
def list_appointments(request):
    """Newest first; optional ``status`` filter."""
    qs = AppointmentRequest.objects.order_by('-created_at', '-id')
    wanted = request.query_params.get('status')
    if wanted:
        qs = qs.filter(status=wanted)
    return Response({'ok': True, 'data': AppointmentRequestSerializer(qs, many=True).data})


@api_view(['POST'])
@permission_classes([IsContentEditor])
def appointment_status(request, pk):
    appointment = AppointmentRequest.objects.filter(pk=pk).first()
    if appointment is None:
        raise RecordNotFound(AppointmentRequest._meta.db_table, pk)
    body = AppointmentStatusSerializer(data=request.data)
    body.is_valid(raise_exception=True)
    previous = appointment.status
    appointment.status = body.validated_data['status']
    appointment.save(update_fields=['status'])
    log_action(user=request.user, action='status', object_type='appointment', object_id=pk,
               detail={'from': previous, 'to': appointment.status})
    return Response({'ok': True, 'data': AppointmentRequestSerializer(appointment).data})
