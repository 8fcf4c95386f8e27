"""
Mirror of the WordPress blog.

Posts are read from the WordPress REST API and upserted into
:class:`cms.models.BlogPost`, matched by the WordPress post id.  SEO data
comes first from the Rank Math ``getHead`` endpoint (the rendered head
HTML), then from post meta fields, with Open Graph and Twitter values
falling back to the plain meta title and description.
"""
from __future__ import annotations

import html
import logging
import time
from dataclasses import asdict, dataclass
from datetime import timezone as dt_timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import bleach
import requests
from bs4 import BeautifulSoup
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from django.utils.text import slugify

from cms.errors import CmsError, SyncError
from cms.models import BlogPost
from cms.services.store import translate_errors

logger = logging.getLogger(__name__)

PER_PAGE = 100
ARTICLE_TYPES = {'Article', 'BlogPosting', 'NewsArticle'}

ALLOWED_TAGS = set(bleach.sanitizer.ALLOWED_TAGS) | {
    'p', 'br', 'hr', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'span', 'div', 'img',
    'figure', 'figcaption', 'table', 'thead', 'tbody', 'tr', 'th', 'td',
    'pre', 'u', 's', 'sub', 'sup',
}
ALLOWED_ATTRIBUTES = {
    '*': ['class', 'id', 'title'],
    'a': ['href', 'title', 'rel', 'target'],
    'img': ['src', 'srcset', 'sizes', 'alt', 'width', 'height', 'loading'],
    'td': ['colspan', 'rowspan'],
    'th': ['colspan', 'rowspan'],
}
ALLOWED_PROTOCOLS = ['http', 'https', 'mailto', 'tel']

ACTIVE_TAGS = ('script', 'style')

# key -> (attribute, value) identifying the tag in the rendered head
_HEAD_META = {
    'description': ('name', 'description'),
    'og_title': ('property', 'og:title'),
    'og_description': ('property', 'og:description'),
    'og_image': ('property', 'og:image'),
    'twitter_title': ('name', 'twitter:title'),
    'twitter_description': ('name', 'twitter:description'),
    'twitter_image': ('name', 'twitter:image'),
    'robots': ('name', 'robots'),
}

_HTTP_MESSAGES = {
    404: 'post not found on WordPress',
    401: 'unauthorized by WordPress',
    403: 'access denied by WordPress',
    500: 'WordPress internal server error',
}


@dataclass
class SyncResult:
    wordpress_id: int
    action: str
    title: str = ''
    post_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict:
        return asdict(self)


def api_url(path: str) -> str:
    return settings.WORDPRESS_API_URL.rstrip('/') + path


def validate_wordpress_id(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number <= 0 or not number.is_integer():
        return None
    return int(number)


def _http_error(response) -> SyncError:
    message = _HTTP_MESSAGES.get(response.status_code) or f'HTTP {response.status_code}: {response.reason}'
    return SyncError(message, status=response.status_code)


def _get(url: str, *, params: Optional[dict] = None, timeout: Optional[float] = None):
    timeout = timeout or settings.WORDPRESS_API_TIMEOUT
    try:
        return requests.get(url, params=params, timeout=timeout)
    except requests.Timeout as exc:
        raise SyncError(f'request timed out after {timeout}s: {url}') from exc
    except requests.RequestException as exc:
        raise SyncError(f'request failed: {exc}') from exc


def _without_active_tags(value: str) -> BeautifulSoup:
    doc = BeautifulSoup(value, 'html.parser')
    for tag in doc.find_all(ACTIVE_TAGS):
        tag.decompose()
    return doc


def clean_html(value: str) -> str:
    if not value:
        return ''
    return bleach.clean(
        str(_without_active_tags(value)),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def html_to_text(value: str) -> str:
    if not value:
        return ''
    return _without_active_tags(value).get_text().strip()


def _meta_content(doc: BeautifulSoup, attribute: str, value: str) -> str:
    # some themes emit twitter:* under property= and og:* under name=
    for attr in (attribute, 'property' if attribute == 'name' else 'name'):
        tag = doc.find('meta', attrs={attr: value})
        if tag is not None and tag.get('content'):
            return tag['content'].strip()
    return ''


def parse_meta_tags(head_html: str) -> Dict[str, str]:
    """Extract SEO values from a rendered ``<head>`` fragment."""
    found: Dict[str, str] = {}
    if not head_html:
        return found
    doc = BeautifulSoup(head_html, 'html.parser')
    if doc.title is not None and doc.title.get_text(strip=True):
        found['title'] = doc.title.get_text(strip=True)
    for key, (attribute, value) in _HEAD_META.items():
        content = _meta_content(doc, attribute, value)
        if content:
            found[key] = content
    canonical = doc.find('link', rel='canonical')
    if canonical is not None and canonical.get('href'):
        found['canonical'] = canonical['href'].strip()
    return found


def meta_field(wp_post: dict, name: str) -> Any:
    """Look a meta value up at the root, ``_``-prefixed, in ``meta`` and in ``yoast_meta``."""
    meta = wp_post.get('meta') or {}
    yoast = wp_post.get('yoast_meta') or {}
    if not isinstance(meta, dict):
        meta = {}
    if not isinstance(yoast, dict):
        yoast = {}
    return (
        wp_post.get(name)
        or wp_post.get(f'_{name}')
        or meta.get(name)
        or meta.get(f'_{name}')
        or yoast.get(name)
        or None
    )


def fetch_seo_head(link: str) -> Dict[str, str]:
    """Rendered SEO values from Rank Math; empty when unavailable."""
    if not link:
        return {}
    try:
        response = _get(
            api_url('/wp-json/rankmath/v1/getHead'),
            params={'url': link},
            timeout=settings.WORDPRESS_SEO_TIMEOUT,
        )
    except SyncError as exc:
        logger.info("rank math head unavailable for %s: %s", link, exc)
        return {}
    if not response.ok:
        return {}
    body = response.text
    # Rank Math answers either raw HTML or {"success": true, "head": "..."}
    if body.lstrip().startswith('{'):
        try:
            body = response.json().get('head') or ''
        except ValueError:
            pass
    return parse_meta_tags(body)


def _parse_date(wp_post: dict):
    gmt = wp_post.get('date_gmt')
    if gmt:
        value = parse_datetime(gmt)
        if value is not None:
            return value if timezone.is_aware(value) else value.replace(tzinfo=dt_timezone.utc)
    local = parse_datetime(wp_post.get('date') or '')
    if local is not None and timezone.is_naive(local):
        local = timezone.make_aware(local)
    return local


def _terms(wp_post: dict, taxonomy: str) -> List[dict]:
    groups = (wp_post.get('_embedded') or {}).get('wp:term') or []
    terms = []
    for group in groups:
        for term in group or []:
            if term.get('taxonomy') == taxonomy:
                terms.append({'id': term.get('id'), 'name': html.unescape(term.get('name') or ''), 'slug': term.get('slug')})
    return terms


def _breadcrumb(link: str) -> Optional[dict]:
    parts = [p for p in urlparse(link).path.split('/') if p]
    if not parts:
        return None
    base = settings.SITE_URL.rstrip('/')
    return {
        '@type': 'BreadcrumbList',
        'itemListElement': [
            {
                '@type': 'ListItem',
                'position': i + 1,
                'name': part.replace('-', ' '),
                'item': f"{base}/{'/'.join(parts[:i + 1])}",
            }
            for i, part in enumerate(parts)
        ],
    }


def build_schema(*, wp_post: dict, fields: dict, schema_type: str, keywords: List[str]) -> dict:
    """JSON-LD markup for one post."""
    link = wp_post.get('link') or ''
    url = fields.get('canonical_url') or link
    image = fields.get('og_image_url') or fields.get('featured_image_url')
    site_name = settings.SITE_NAME
    author = {'@type': 'Person', 'name': fields.get('author_name') or site_name}
    if fields.get('author_email'):
        author['email'] = fields['author_email']
    schema = {
        '@context': 'https://schema.org',
        '@type': schema_type,
        'headline': fields.get('meta_title') or fields['title'],
        'name': fields.get('meta_title') or fields['title'],
        'description': fields.get('meta_description') or fields.get('excerpt') or '',
        'image': [image] if image else [],
        'datePublished': wp_post.get('date'),
        'dateModified': wp_post.get('modified') or wp_post.get('date'),
        'author': author,
        'publisher': {
            '@type': 'Organization',
            'name': site_name,
            'logo': {'@type': 'ImageObject', 'url': f"{settings.SITE_URL.rstrip('/')}/logo.png"},
        },
        'mainEntityOfPage': {'@type': 'WebPage', '@id': url},
        'url': url,
    }
    if fields.get('primary_category'):
        schema['articleSection'] = fields['primary_category']
    if schema_type in ARTICLE_TYPES:
        schema['articleBody'] = (fields.get('content') or '')[:5000]
        if wp_post.get('categories'):
            schema['keywords'] = ', '.join(k for k in keywords if k)
    if link:
        breadcrumb = _breadcrumb(link)
        if breadcrumb:
            schema['breadcrumb'] = breadcrumb
    return schema


def post_fields(wp_post: dict, head: Optional[Dict[str, str]] = None) -> dict:
    """Map a WordPress REST post onto BlogPost field values."""
    head = head or {}
    embedded = wp_post.get('_embedded') or {}
    title = html.unescape((wp_post.get('title') or {}).get('rendered') or '')
    link = wp_post.get('link') or ''
    content = clean_html((wp_post.get('content') or {}).get('rendered') or '')
    excerpt_html = (wp_post.get('excerpt') or {}).get('rendered')
    media = (embedded.get('wp:featuredmedia') or [None])[0] or {}
    author = (embedded.get('author') or [None])[0] or {}

    def meta(name):
        return meta_field(wp_post, name)

    meta_title = head.get('title') or meta('rank_math_title') or meta('yoast_wpseo_title')
    meta_description = head.get('description') or meta('rank_math_description') or meta('yoast_wpseo_metadesc')
    keywords = meta('rank_math_focus_keyword') or meta('yoast_wpseo_focuskw')
    secondary = meta('rank_math_secondary_focus_keyword')
    tertiary = meta('rank_math_tertiary_focus_keyword')
    og_title = head.get('og_title') or meta('rank_math_facebook_title') or meta_title
    og_description = head.get('og_description') or meta('rank_math_facebook_description') or meta_description
    og_image = head.get('og_image') or meta('rank_math_facebook_image') or meta('rank_math_og_image')
    featured = media.get('source_url')
    schema_type = meta('rank_math_schema_type')
    article_schema_type = meta('rank_math_schema_article_type')

    categories = _terms(wp_post, 'category')
    primary_category = meta('rank_math_primary_category')
    primary = next((c for c in categories if str(c['id']) == str(primary_category)), None)
    if primary is None and categories:
        primary = categories[0]

    fields = {
        'title': title,
        'slug': wp_post.get('slug') or slugify(title),
        'excerpt': html_to_text(excerpt_html) if excerpt_html else None,
        'content': content,
        'featured_image_url': featured or None,
        'author_name': author.get('name'),
        'author_email': author.get('email'),
        'published': True,
        'published_at': _parse_date(wp_post),
        'wordpress_url': link,
        'categories': categories,
        'tags': _terms(wp_post, 'post_tag'),
        'primary_category': primary['name'] if primary else None,
        'primary_category_slug': primary['slug'] if primary else None,
        'meta_title': meta_title or None,
        'meta_description': meta_description or None,
        'meta_keywords': keywords or None,
        'secondary_keywords': secondary or None,
        'tertiary_keywords': tertiary or None,
        'canonical_url': head.get('canonical') or meta('rank_math_canonical_url') or link or None,
        'robots_meta': head.get('robots') or meta('rank_math_robots') or None,
        'advanced_robots_meta': meta('rank_math_advanced_robots') or None,
        'og_title': og_title or None,
        'og_description': og_description or None,
        'og_image_url': og_image or featured or None,
        'twitter_title': head.get('twitter_title') or meta('rank_math_twitter_title') or og_title or None,
        'twitter_description': (
            head.get('twitter_description') or meta('rank_math_twitter_description') or og_description or None
        ),
        'twitter_image_url': head.get('twitter_image') or meta('rank_math_twitter_image') or og_image or featured or None,
        'twitter_card_type': meta('rank_math_twitter_card_type') or 'summary_large_image',
        'schema_type': schema_type or article_schema_type or 'Article',
        'rich_snippet_type': meta('rank_math_rich_snippet') or None,
        'article_schema_type': article_schema_type or None,
        'seo_score': str(meta('rank_math_seo_score')) if meta('rank_math_seo_score') else None,
    }
    # Rank Math may return lists or numbers for robots values
    for key in ('robots_meta', 'advanced_robots_meta'):
        if isinstance(fields[key], (list, dict)):
            fields[key] = ','.join(fields[key]) if isinstance(fields[key], list) else str(fields[key])
    fields['schema_markup'] = build_schema(
        wp_post=wp_post, fields=fields, schema_type=fields['schema_type'],
        keywords=[keywords, secondary, tertiary],
    )
    return fields


def fetch_post(wordpress_id: int) -> dict:
    response = _get(api_url(f'/wp-json/wp/v2/posts/{wordpress_id}'), params={'_embed': 'true'})
    if not response.ok:
        raise _http_error(response)
    try:
        return response.json()
    except ValueError as exc:
        raise SyncError(f'invalid JSON for post {wordpress_id}') from exc


def list_posts() -> List[dict]:
    """All published posts, page by page until WordPress runs out."""
    posts: List[dict] = []
    page = 1
    while True:
        response = _get(
            api_url('/wp-json/wp/v2/posts'),
            params={'per_page': PER_PAGE, 'page': page, '_embed': 'true', 'status': 'publish'},
        )
        if not response.ok:
            # WordPress answers 400 for a page past the end
            if response.status_code == 400:
                break
            raise _http_error(response)
        try:
            batch = response.json() or []
        except ValueError as exc:
            raise SyncError(f'invalid JSON for post list page {page}') from exc
        if not isinstance(batch, list):
            raise SyncError(f'unexpected post list payload on page {page}')
        if not batch:
            break
        posts.extend(batch)
        if len(batch) < PER_PAGE:
            break
        page += 1
    return posts


def upsert_post(wordpress_id: int, fields: dict) -> SyncResult:
    table = BlogPost._meta.db_table
    with translate_errors(table):
        slug = fields['slug']
        if BlogPost.objects.filter(slug=slug).exclude(wordpress_id=wordpress_id).exists():
            fields = dict(fields, slug=f'{slug}-{wordpress_id}')
        post, created = BlogPost.objects.update_or_create(wordpress_id=wordpress_id, defaults=fields)
    action = 'created' if created else 'updated'
    logger.info("blog sync %s wordpress_id=%s slug=%s", action, wordpress_id, post.slug)
    return SyncResult(wordpress_id=wordpress_id, action=action, title=post.title, post_id=post.pk)


def sync_post(wordpress_id: int) -> SyncResult:
    """Fetch one post from WordPress and store it."""
    wp_post = fetch_post(wordpress_id)
    if not wp_post or wp_post.get('status') != 'publish':
        raise SyncError(f'post {wordpress_id} is not published')
    head = fetch_seo_head(wp_post.get('link') or '')
    return upsert_post(int(wp_post.get('id') or wordpress_id), post_fields(wp_post, head))


def sync_all(*, delay_ms: Optional[int] = None, sleep: Callable[[float], None] = time.sleep) -> dict:
    delay = (settings.BLOG_SYNC_DELAY_MS if delay_ms is None else delay_ms) / 1000.0
    posts = list_posts()
    results: List[SyncResult] = []
    for index, wp_post in enumerate(posts):
        if index and delay:
            sleep(delay)
        wordpress_id = wp_post.get('id')
        try:
            result = sync_post(wordpress_id)
        except CmsError as exc:
            logger.warning("blog sync failed wordpress_id=%s: %s", wordpress_id, exc.message)
            result = SyncResult(
                wordpress_id=wordpress_id, action='failed',
                title=html.unescape((wp_post.get('title') or {}).get('rendered') or ''),
                error=exc.message,
            )
        results.append(result)
    ok = sum(1 for r in results if r.ok)
    logger.info("blog sync finished total=%s ok=%s failed=%s", len(results), ok, len(results) - ok)
    return {
        'total': len(results),
        'successCount': ok,
        'errorCount': len(results) - ok,
        'results': [r.as_dict() for r in results],
    }


def delete_post(wordpress_id: int) -> dict:
    """Remove every local copy of a WordPress post, duplicates included."""
    with translate_errors(BlogPost._meta.db_table):
        matches = list(BlogPost.objects.filter(wordpress_id=wordpress_id).values_list('title', flat=True))
        if matches:
            BlogPost.objects.filter(wordpress_id=wordpress_id).delete()
    if len(matches) > 1:
        logger.warning("removed %s copies of wordpress_id=%s", len(matches), wordpress_id)
    elif matches:
        logger.info("removed wordpress_id=%s", wordpress_id)
    return {
        'wordpress_id': wordpress_id,
        'deleted_count': len(matches),
        'title': matches[0] if matches else None,
    }
