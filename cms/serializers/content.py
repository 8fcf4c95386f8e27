from collections.abc import Mapping

import bleach
from rest_framework import serializers

from cms.models import AboutFeature, Faq, Insurer, Professional, Service, SiteSettings, Testimonial

# Older front-end forms and imports send the picture under other keys
IMAGE_ALIASES = ('photo_url', 'photo', 'image', 'foto')

BASE_FIELDS = ('id', 'order', 'image_url', 'created_at', 'updated_at')
BASE_READ_ONLY = ('id', 'order', 'created_at', 'updated_at')


def clean_text(value):
    if not isinstance(value, str):
        return value
    return bleach.clean(value.strip(), tags=[], strip=True)


class OrderedContentSerializer(serializers.ModelSerializer):
    """Shared behaviour of the ordered list serializers.

    ``order`` is read-only: it is assigned at creation and afterwards only
    changed by normalization or a move.  Legacy picture keys are folded
    into ``image_url`` before validation.
    """
    text_fields: tuple = ()

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            data = data.dict() if hasattr(data, 'dict') else dict(data)
            if not data.get('image_url'):
                for alias in IMAGE_ALIASES:
                    value = data.get(alias)
                    if isinstance(value, str) and value:
                        data['image_url'] = value
                        break
        return super().to_internal_value(data)

    def validate(self, attrs):
        for name in self.text_fields:
            if name in attrs:
                attrs[name] = clean_text(attrs[name])
        return attrs


class ProfessionalSerializer(OrderedContentSerializer):
    text_fields = ('name', 'title', 'specialty', 'cv')

    class Meta:
        model = Professional
        fields = BASE_FIELDS + ('name', 'title', 'specialty', 'cv')
        read_only_fields = BASE_READ_ONLY


class ServiceSerializer(OrderedContentSerializer):
    text_fields = ('title', 'description', 'icon')

    class Meta:
        model = Service
        fields = BASE_FIELDS + ('title', 'description', 'icon')
        read_only_fields = BASE_READ_ONLY


class TestimonialSerializer(OrderedContentSerializer):
    text_fields = ('name', 'role', 'text')

    class Meta:
        model = Testimonial
        fields = BASE_FIELDS + ('name', 'role', 'text', 'rating')
        read_only_fields = BASE_READ_ONLY


class AboutFeatureSerializer(OrderedContentSerializer):
    text_fields = ('title', 'description', 'icon')

    class Meta:
        model = AboutFeature
        fields = BASE_FIELDS + ('title', 'description', 'icon')
        read_only_fields = BASE_READ_ONLY


class FaqSerializer(OrderedContentSerializer):
    text_fields = ('question', 'answer')

    class Meta:
        model = Faq
        fields = BASE_FIELDS + ('question', 'answer')
        read_only_fields = BASE_READ_ONLY


class InsurerSerializer(OrderedContentSerializer):
    text_fields = ('name',)

    class Meta:
        model = Insurer
        fields = BASE_FIELDS + ('name', 'website')
        read_only_fields = BASE_READ_ONLY


class SiteSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteSettings
        fields = (
            'hero_title', 'hero_subtitle', 'hero_cta_label',
            'contact_phone', 'contact_email', 'address',
            'logo_url', 'updated_at',
        )
        read_only_fields = ('logo_url', 'updated_at')

    def validate(self, attrs):
        return {k: clean_text(v) for k, v in attrs.items()}


class MoveSerializer(serializers.Serializer):
    index = serializers.IntegerField(min_value=0)
    direction = serializers.ChoiceField(choices=['up', 'down'])
    ids = serializers.ListField(child=serializers.CharField(max_length=64), required=False, allow_empty=False)
