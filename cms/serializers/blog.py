from rest_framework import serializers

from cms.models import BlogPost


class BlogPostListSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlogPost
        fields = (
            'id', 'title', 'slug', 'excerpt', 'featured_image_url', 'author_name',
            'published_at', 'categories', 'tags', 'primary_category',
            'primary_category_slug', 'views',
        )


class BlogPostDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlogPost
        exclude = ('author_email',)
