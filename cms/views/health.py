import logging
import uuid

from django.core.cache import cache
from django.db import DatabaseError, connections
from django.http import JsonResponse

logger = logging.getLogger(__name__)

CACHE_CHECK_KEY = 'cms:healthz'


def _database_ok() -> bool:
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return bool(row and row[0] == 1)
    except DatabaseError as e:
        logger.warning("healthz database check failed: %s", e)
        return False


def _cache_ok() -> bool:
    # move locks and cached public sections depend on a working shared cache
    token = uuid.uuid4().hex
    try:
        cache.set(CACHE_CHECK_KEY, token, 10)
        return cache.get(CACHE_CHECK_KEY) == token
    except Exception as e:  # backend-specific connection errors (redis, memcached)
        logger.warning("healthz cache check failed: %s", e)
        return False


def healthz(request):
    db = _database_ok()
    cache_ok = _cache_ok()
    ok = db and cache_ok
    return JsonResponse({'ok': ok, 'db': db, 'cache': cache_ok}, status=200 if ok else 503)
