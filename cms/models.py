"""
Database models for the clinic website content.

Every list shown on the public site (professionals, services,
testimonials, about features, FAQs and insurer logos) is an
:class:`OrderedContent` table: records carry an opaque string id and a
nullable integer ``order`` that determines display sequence.  A missing
order means the record has not been normalized yet; see
``cms.services.ordering``.
"""
from __future__ import annotations

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


def _new_id() -> str:
    return uuid.uuid4().hex


class OrderedContent(models.Model):
    """Base for records displayed in a user-ordered list.

    ``label_field`` names the column used as tie-break when two records
    share an order value or have none.
    """
    label_field = 'name'

    id = models.CharField(max_length=32, primary_key=True, default=_new_id, editable=False)
    # Nullable on purpose: None means "unordered, needs normalization"
    order = models.BigIntegerField(null=True, blank=True, db_index=True)
    image_url = models.CharField(max_length=1024, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def label(self) -> str:
        return getattr(self, self.label_field, '') or ''

    def __str__(self) -> str:
        return f"{self.label} (#{self.order})"


class Professional(OrderedContent):
    """A member of the clinical staff shown in the team carousel."""
    name = models.CharField(max_length=255)
    title = models.CharField(max_length=255, blank=True)
    specialty = models.CharField(max_length=255, blank=True)
    cv = models.TextField(blank=True)


class Service(OrderedContent):
    label_field = 'title'

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=64, blank=True, help_text="Icon name used by the front-end")


class Testimonial(OrderedContent):
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=255, blank=True, help_text="e.g. 'Paciente'")
    text = models.TextField()
    rating = models.PositiveSmallIntegerField(
        default=5, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )


class AboutFeature(OrderedContent):
    """A highlight block of the 'about the clinic' section."""
    label_field = 'title'

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=64, blank=True)


class Faq(OrderedContent):
    label_field = 'question'

    question = models.CharField(max_length=500)
    answer = models.TextField()


class Insurer(OrderedContent):
    """An insurance provider whose logo is shown on the home page."""
    name = models.CharField(max_length=255)
    website = models.URLField(max_length=512, blank=True, default='')


class SiteSettings(models.Model):
    """Single row holding hero texts, contacts and the logo."""
    hero_title = models.CharField(max_length=255, blank=True)
    hero_subtitle = models.TextField(blank=True)
    hero_cta_label = models.CharField(max_length=100, blank=True)
    contact_phone = models.CharField(max_length=50, blank=True)
    contact_email = models.EmailField(blank=True)
    address = models.CharField(max_length=500, blank=True)
    logo_url = models.CharField(max_length=1024, blank=True, default='')
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'site settings'

    @classmethod
    def load(cls) -> 'SiteSettings':
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj

    def __str__(self) -> str:
        return self.hero_title or 'Site settings'


class BlogPost(models.Model):
    """A post mirrored from the external WordPress blog.

    ``wordpress_id`` is the external numeric id and the upsert key of the
    sync job; the local primary key is never exposed to WordPress.
    """
    id = models.CharField(max_length=32, primary_key=True, default=_new_id, editable=False)
    wordpress_id = models.PositiveBigIntegerField(unique=True, null=True, blank=True)
    wordpress_url = models.URLField(max_length=1024, blank=True, default='')

    title = models.CharField(max_length=500)
    slug = models.SlugField(max_length=255, unique=True)
    excerpt = models.TextField(blank=True, null=True)
    content = models.TextField(blank=True, default='')
    featured_image_url = models.URLField(max_length=1024, blank=True, null=True)
    author_name = models.CharField(max_length=255, blank=True, null=True)
    author_email = models.CharField(max_length=255, blank=True, null=True)
    published = models.BooleanField(default=False, db_index=True)
    published_at = models.DateTimeField(blank=True, null=True, db_index=True)
    categories = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    primary_category = models.CharField(max_length=255, blank=True, null=True)
    primary_category_slug = models.CharField(max_length=255, blank=True, null=True)
    views = models.PositiveIntegerField(default=0)

    # SEO
    meta_title = models.CharField(max_length=500, blank=True, null=True)
    meta_description = models.TextField(blank=True, null=True)
    meta_keywords = models.CharField(max_length=500, blank=True, null=True)
    secondary_keywords = models.CharField(max_length=500, blank=True, null=True)
    tertiary_keywords = models.CharField(max_length=500, blank=True, null=True)
    canonical_url = models.URLField(max_length=1024, blank=True, null=True)
    robots_meta = models.CharField(max_length=255, blank=True, null=True)
    advanced_robots_meta = models.CharField(max_length=255, blank=True, null=True)
    og_title = models.CharField(max_length=500, blank=True, null=True)
    og_description = models.TextField(blank=True, null=True)
    og_image_url = models.URLField(max_length=1024, blank=True, null=True)
    twitter_title = models.CharField(max_length=500, blank=True, null=True)
    twitter_description = models.TextField(blank=True, null=True)
    twitter_image_url = models.URLField(max_length=1024, blank=True, null=True)
    twitter_card_type = models.CharField(max_length=64, default='summary_large_image')
    schema_type = models.CharField(max_length=64, blank=True, null=True)
    schema_markup = models.JSONField(default=dict, blank=True)
    rich_snippet_type = models.CharField(max_length=64, blank=True, null=True)
    article_schema_type = models.CharField(max_length=64, blank=True, null=True)
    seo_score = models.CharField(max_length=16, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['published', 'published_at'], name='cms_blogpost_published_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.slug})"


class AppointmentRequest(models.Model):
    """A consultation request submitted through the public booking form."""
    STATUS_NEW = 'new'
    STATUS_CONTACTED = 'contacted'
    STATUS_SCHEDULED = 'scheduled'
    STATUS_CLOSED = 'closed'
    STATUS_CHOICES = (
        (STATUS_NEW, 'new'),
        (STATUS_CONTACTED, 'contacted'),
        (STATUS_SCHEDULED, 'scheduled'),
        (STATUS_CLOSED, 'closed'),
    )

    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=50)
    consultation_type = models.CharField(max_length=255)
    preferred_date = models.DateField(blank=True, null=True)
    preferred_time = models.CharField(max_length=32, blank=True)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_NEW, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} <{self.email}> {self.consultation_type}"


class AuditEvent(models.Model):
    actor = models.CharField(max_length=150, blank=True, default='')
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='cms_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='cms_audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}:{self.object_id}"
