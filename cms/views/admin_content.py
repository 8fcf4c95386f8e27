"""
Admin endpoints for the ordered content lists.

Every list registered in :mod:`cms.services.registry` shares the same
routes: list and create, detail, move one step up or down, normalize and
image upload.  Only staff users may call them.  Any write invalidates the
cached public payloads.
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from ..permissions import IsContentEditor
from ..serializers.content import MoveSerializer
from ..services.audit import log_action
from ..services.content import invalidate_public_cache
from ..services.ordering import Mover, Normalizer
from ..services.registry import get_list
from ..services.store import translate_errors
from ..services.uploads import pick_upload, store_image

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsContentEditor])
def content_list(request, kind):
    """List a section sorted for display, or add a record at the end of it."""
    spec = get_list(kind)
    store = spec.store()
    if request.method == 'GET':
        records = store.fetch_sorted()
        return Response({'ok': True, 'data': spec.serializer(records, many=True).data})

    serializer = spec.serializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    with translate_errors(store.table):
        obj = serializer.save(order=store.next_order())
    log_action(user=request.user, action='create', object_type=kind, object_id=obj.pk, detail={'order': obj.order})
    invalidate_public_cache()
    return Response({'ok': True, 'data': spec.serializer(obj).data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsContentEditor])
def content_detail(request, kind, pk):
    spec = get_list(kind)
    store = spec.store()
    obj = store.get(pk)
    if request.method == 'GET':
        return Response({'ok': True, 'data': spec.serializer(obj).data})

    if request.method == 'DELETE':
        with translate_errors(store.table):
            obj.delete()
        log_action(user=request.user, action='delete', object_type=kind, object_id=pk)
        invalidate_public_cache()
        return Response({'ok': True})

    serializer = spec.serializer(obj, data=request.data, partial=request.method == 'PATCH')
    serializer.is_valid(raise_exception=True)
    with translate_errors(store.table):
        obj = serializer.save()
    log_action(
        user=request.user, action='update', object_type=kind, object_id=pk,
        detail={'fields': sorted(serializer.validated_data)},
    )
    invalidate_public_cache()
    return Response({'ok': True, 'data': spec.serializer(obj).data})


@api_view(['POST'])
@permission_classes([IsContentEditor])
def content_move(request, kind):
    """Move the record at ``index`` one step ``up`` or ``down``.

    ``ids`` is the order in which the caller currently shows the list; when
    it is omitted the stored order is used.  Returns the refreshed list.
    """
    spec = get_list(kind)
    body = MoveSerializer(data=request.data)
    body.is_valid(raise_exception=True)
    data = body.validated_data
    result = Mover(spec.store()).move(data['index'], data['direction'], data.get('ids'))
    log_action(
        user=request.user, action='move', object_type=kind, object_id=result.moved,
        detail={'direction': data['direction'], 'swappedWith': result.swapped_with, 'orders': result.orders},
    )
    invalidate_public_cache()
    return Response({
        'ok': True,
        'moved': result.moved,
        'swappedWith': result.swapped_with,
        'orders': result.orders,
        'data': spec.serializer(result.records, many=True).data,
    })


@api_view(['POST'])
@permission_classes([IsContentEditor])
def content_normalize(request, kind):
    spec = get_list(kind)
    result = Normalizer(spec.store()).normalize()
    if result.changed:
        log_action(user=request.user, action='normalize', object_type=kind, detail={'changed': result.changed})
        invalidate_public_cache()
    return Response({'ok': True, 'changed': result.changed, 'data': spec.serializer(result.records, many=True).data})


@api_view(['POST'])
@permission_classes([IsContentEditor])
@parser_classes([MultiPartParser, FormParser])
def content_image(request, kind, pk):
    """Upload a picture for one record and store its URL in ``image_url``."""
    spec = get_list(kind)
    store = spec.store()
    obj = store.get(pk)
    url = store_image(kind, obj.pk, pick_upload(request.FILES))
    obj.image_url = url
    with translate_errors(store.table):
        obj.save(update_fields=['image_url', 'updated_at'])
    log_action(user=request.user, action='upload', object_type=kind, object_id=obj.pk, detail={'url': url})
    invalidate_public_cache()
    return Response({'ok': True, 'url': url, 'data': spec.serializer(obj).data})
