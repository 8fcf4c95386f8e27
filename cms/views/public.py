"""
Read-only endpoints used by the public website.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..services.content import home_payload, public_section
from ..services.registry import get_list


@api_view(['GET'])
@permission_classes([AllowAny])
def home(request):
    """Everything the home page shows: site texts, every section and the latest posts.

    A section that cannot be read is replaced by its fallback and listed
    under ``degraded``.
    """
    return Response({'ok': True, 'data': home_payload()})


@api_view(['GET'])
@permission_classes([AllowAny])
def section(request, kind):
    spec = get_list(kind)
    return Response({'ok': True, 'data': public_section(kind, spec)})
