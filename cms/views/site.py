"""
Site settings (hero texts, contacts, logo) for the admin panel.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from ..models import SiteSettings
from ..permissions import IsContentEditor
from ..serializers.content import SiteSettingsSerializer
from ..services.audit import log_action
from ..services.content import invalidate_public_cache
from ..services.uploads import pick_upload, store_logo


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsContentEditor])
def site_settings(request):
    site = SiteSettings.load()
    if request.method == 'GET':
        return Response({'ok': True, 'data': SiteSettingsSerializer(site).data})
    serializer = SiteSettingsSerializer(site, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    with transaction.atomic():
        site = serializer.save()
    log_action(user=request.user, action='update', object_type='site', object_id=site.pk,
               detail={'fields': sorted(serializer.validated_data)})
    invalidate_public_cache()
    return Response({'ok': True, 'data': SiteSettingsSerializer(site).data})


@api_view(['POST'])
@permission_classes([IsContentEditor])
@parser_classes([MultiPartParser, FormParser])
def site_logo(request):
    """Replace the site logo."""
    url = store_logo(pick_upload(request.FILES))
    site = SiteSettings.load()
    site.logo_url = url
    site.save(update_fields=['logo_url', 'updated_at'])
    log_action(user=request.user, action='upload', object_type='site', object_id=site.pk, detail={'url': url})
    invalidate_public_cache()
    return Response({'ok': True, 'url': url})
