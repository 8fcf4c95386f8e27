import logging

from rest_framework.exceptions import ValidationError
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

from cms.errors import CmsError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, CmsError):
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code, exc.message)
        else:
            logger.info("%s: %s", exc.code, exc.message)
        return Response({'ok': False, 'error': exc.as_payload()}, status=exc.status_code)

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled error in %s", context.get('view'))
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(exc, ValidationError):
        return Response({'ok': False, 'error': {'code': 'invalid', 'message': resp.data}}, status=resp.status_code)
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response({'ok': False, 'error': {'code': 'api_error', 'message': detail}}, status=resp.status_code, headers=_auth_headers(resp))


def _auth_headers(resp):
    # keep WWW-Authenticate / Retry-After set by DRF
    return {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
