from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..errors import RecordNotFound
from ..models import BlogPost
from ..serializers.blog import BlogPostDetailSerializer, BlogPostListSerializer
from ..services.content import category_counts, published_posts, record_view, related_posts, search_posts


@api_view(['GET'])
@permission_classes([AllowAny])
def blog_posts(request):
    """Published posts, newest first.

    Query params:
      - q: text contained in title or excerpt
      - category: category slug
      - tag: tag slug
    """
    q = (request.query_params.get('q') or '').strip() or None
    category = (request.query_params.get('category') or '').strip() or None
    tag = (request.query_params.get('tag') or '').strip() or None
    posts = search_posts(q=q, category=category, tag=tag)
    return Response({
        'ok': True,
        'data': BlogPostListSerializer(posts, many=True).data,
        'categories': category_counts(),
        'total': len(posts),
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def blog_post_detail(request, slug):
    post = published_posts().filter(slug=slug).first()
    if post is None:
        raise RecordNotFound(BlogPost._meta.db_table, slug, message=f'post "{slug}" not found')
    record_view(post)
    return Response({
        'ok': True,
        'data': BlogPostDetailSerializer(post).data,
        'related': BlogPostListSerializer(related_posts(post), many=True).data,
    })
