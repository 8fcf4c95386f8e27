"""
Django admin registrations for the clinic content models.

The content lists are shown in display order (``order`` ascending, unset
values last).  ``order`` is read-only here: reordering goes through the
move endpoint so the list stays dense.
"""

from django.contrib import admin
from django.db.models import F

from .models import (
    AboutFeature,
    AppointmentRequest,
    AuditEvent,
    BlogPost,
    Faq,
    Insurer,
    Professional,
    Service,
    SiteSettings,
    Testimonial,
)


class OrderedContentAdmin(admin.ModelAdmin):
    readonly_fields = ('id', 'order', 'created_at', 'updated_at')

    def get_ordering(self, request):
        return [F('order').asc(nulls_last=True), self.model.label_field]


@admin.register(Professional)
class ProfessionalAdmin(OrderedContentAdmin):
    list_display = ('name', 'title', 'specialty', 'order')
    search_fields = ('name', 'specialty')


@admin.register(Service)
class ServiceAdmin(OrderedContentAdmin):
    list_display = ('title', 'icon', 'order')
    search_fields = ('title',)


@admin.register(Testimonial)
class TestimonialAdmin(OrderedContentAdmin):
    list_display = ('name', 'role', 'rating', 'order')


@admin.register(AboutFeature)
class AboutFeatureAdmin(OrderedContentAdmin):
    list_display = ('title', 'order')


@admin.register(Faq)
class FaqAdmin(OrderedContentAdmin):
    list_display = ('question', 'order')
    search_fields = ('question', 'answer')


@admin.register(Insurer)
class InsurerAdmin(OrderedContentAdmin):
    list_display = ('name', 'website', 'order')


@admin.register(SiteSettings)
class SiteSettingsAdmin(admin.ModelAdmin):
    list_display = ('hero_title', 'contact_email', 'updated_at')


@admin.register(BlogPost)
class BlogPostAdmin(admin.ModelAdmin):
    list_display = ('title', 'slug', 'wordpress_id', 'published', 'published_at', 'views')
    list_filter = ('published',)
    search_fields = ('title', 'slug')


@admin.register(AppointmentRequest)
class AppointmentRequestAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'phone', 'consultation_type', 'preferred_date', 'status', 'created_at')
    list_filter = ('status', 'consultation_type')
    search_fields = ('name', 'email', 'phone')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'object_type', 'object_id', 'actor', 'created_at')
    list_filter = ('action', 'object_type')
