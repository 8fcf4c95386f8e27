"""
Webhook used by WordPress (or cron) to keep the blog mirror current.

``POST`` syncs one post, ``GET`` syncs every published post and
``DELETE`` removes a post.  When ``BLOG_SYNC_SECRET`` is configured the
caller must send it as ``secret`` (body, or query string for ``GET``).
"""
from __future__ import annotations

import hmac

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..services import blog_sync
from ..services.audit import log_action
from ..services.content import invalidate_public_cache


def _secret_ok(given) -> bool:
    expected = getattr(settings, 'BLOG_SYNC_SECRET', '') or ''
    if not expected:
        return True
    return hmac.compare_digest(str(given or ''), expected)


def _unauthorized():
    return Response({'ok': False, 'error': {'code': 'unauthorized', 'message': 'Unauthorized'}},
                    status=status.HTTP_401_UNAUTHORIZED)


def _invalid_id():
    return Response(
        {'ok': False, 'error': {'code': 'invalid', 'message': 'wordpress_id must be a positive integer'}},
        status=status.HTTP_400_BAD_REQUEST,
    )


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([AllowAny])
def sync_webhook(request):
    if request.method == 'GET':
        if not _secret_ok(request.query_params.get('secret')):
            return _unauthorized()
        summary = blog_sync.sync_all()
        log_action(user=request.user, action='sync', object_type='blog',
                   detail={k: summary[k] for k in ('total', 'successCount', 'errorCount')})
        invalidate_public_cache()
        return Response(dict(summary, ok=True))

    if not _secret_ok(request.data.get('secret')):
        return _unauthorized()
    wordpress_id = blog_sync.validate_wordpress_id(request.data.get('wordpress_id'))
    if wordpress_id is None:
        return _invalid_id()

    if request.method == 'DELETE':
        result = blog_sync.delete_post(wordpress_id)
        log_action(user=request.user, action='delete', object_type='blog', object_id=wordpress_id,
                   detail={'deleted': result['deleted_count']})
        invalidate_public_cache()
        return Response(dict(result, ok=True))

    result = blog_sync.sync_post(wordpress_id)
    log_action(user=request.user, action='sync', object_type='blog', object_id=wordpress_id,
               detail={'action': result.action})
    invalidate_public_cache()
    return Response({'ok': True, **result.as_dict()})
