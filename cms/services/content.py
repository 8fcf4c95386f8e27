"""
Read side of the public site: ordered sections, home page payload and
blog queries.

Each ordered section is read independently; a section that cannot be
read (store unavailable, schema not migrated) degrades to its fallback
instead of failing the whole page.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.core.cache import cache
from django.db.models import F, Q

from cms.errors import SchemaFieldMissing, TransportError
from cms.models import BlogPost, SiteSettings
from cms.serializers.blog import BlogPostListSerializer
from cms.serializers.content import SiteSettingsSerializer
from cms.services import seeds
from cms.services.registry import LISTS, ListSpec
from cms.services.store import NULLS_LAST, translate_errors

logger = logging.getLogger(__name__)

HOME_CACHE_KEY = 'public:home'
SECTION_CACHE_KEY = 'public:section:{kind}'


def _cache_seconds() -> int:
    return int(getattr(settings, 'PUBLIC_CACHE_SECONDS', 300))


def invalidate_public_cache() -> None:
    cache.delete_many([HOME_CACHE_KEY] + [SECTION_CACHE_KEY.format(kind=k) for k in LISTS])


def read_section(spec: ListSpec) -> Tuple[List[dict], bool]:
    """Return ``(records, degraded)`` for one ordered list, nulls last."""
    try:
        records = spec.store(nulls=NULLS_LAST).fetch_sorted()
    except (TransportError, SchemaFieldMissing) as exc:
        logger.warning("section %s unavailable (%s), using %s fallback", spec.kind, exc.code, spec.fallback)
        return spec.fallback_records(), True
    return spec.serializer(records, many=True).data, False


def public_section(kind: str, spec: ListSpec) -> List[dict]:
    key = SECTION_CACHE_KEY.format(kind=kind)
    cached = cache.get(key)
    if cached is not None:
        return cached
    data, degraded = read_section(spec)
    if not degraded:
        cache.set(key, data, _cache_seconds())
    return data


def site_payload() -> dict:
    try:
        with translate_errors(SiteSettings._meta.db_table):
            site = SiteSettings.objects.filter(pk=1).first()
    except (TransportError, SchemaFieldMissing):
        logger.warning("site settings unavailable, using defaults")
        site = None
    if site is None:
        return dict(seeds.SITE, logo_url='')
    return SiteSettingsSerializer(site).data


def published_posts():
    return BlogPost.objects.filter(published=True).order_by(
        F('published_at').desc(nulls_last=True), '-created_at'
    )


def latest_posts(limit: int = 3) -> List[dict]:
    try:
        with translate_errors(BlogPost._meta.db_table):
            posts = list(published_posts()[:limit])
    except (TransportError, SchemaFieldMissing):
        logger.warning("blog posts unavailable for home page")
        return []
    return BlogPostListSerializer(posts, many=True).data


def home_payload() -> dict:
    cached = cache.get(HOME_CACHE_KEY)
    if cached is not None:
        return cached
    sections: Dict[str, List[dict]] = {}
    degraded = []
    for kind, spec in LISTS.items():
        data, failed = read_section(spec)
        sections[kind] = data
        if failed:
            degraded.append(kind)
    payload = {
        'site': site_payload(),
        'sections': sections,
        'latestPosts': latest_posts(),
        'degraded': degraded,
    }
    if not degraded:
        cache.set(HOME_CACHE_KEY, payload, _cache_seconds())
    return payload


def search_posts(*, q: Optional[str]=None, category: Optional[str]=None, tag: Optional[str]=None):
    qs = published_posts()
    if q:
        qs = qs.filter(Q(title__icontains=q) | Q(excerpt__icontains=q))
    posts = list(qs)
    # categories and tags are JSON lists of {name, slug}; filtered in Python to stay backend independent
    if category:
        posts = [p for p in posts if any(c.get('slug') == category for c in p.categories or [])]
    if tag:
        posts = [p for p in posts if any(t.get('slug') == tag for t in p.tags or [])]
    return posts


def category_counts() -> List[dict]:
    counts: Dict[str, dict] = {}
    for categories in published_posts().values_list('categories', flat=True):
        for c in categories or []:
            slug = c.get('slug')
            if not slug:
                continue
            entry = counts.setdefault(slug, {'name': c.get('name') or slug, 'slug': slug, 'count': 0})
            entry['count'] += 1
    return sorted(counts.values(), key=lambda c: (-c['count'], c['name']))


def record_view(post: BlogPost) -> None:
    BlogPost.objects.filter(pk=post.pk).update(views=F('views') + 1)
    post.refresh_from_db(fields=['views'])


def related_posts(post: BlogPost, limit: int = 3) -> List[BlogPost]:
    """Posts sharing a category with ``post``, newest first, topped up with recent posts."""
    slugs = {c.get('slug') for c in post.categories or [] if c.get('slug')}
    candidates = list(published_posts().exclude(pk=post.pk)[:50])
    related = [p for p in candidates if slugs & {c.get('slug') for c in p.categories or []}]
    if len(related) < limit:
        related += [p for p in candidates if p not in related][:limit - len(related)]
    return related[:limit]
