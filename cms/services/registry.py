"""
Ordered lists exposed by the admin and public APIs, keyed by URL slug.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Type

from rest_framework import serializers

from cms.errors import RecordNotFound
from cms.models import AboutFeature, Faq, Insurer, OrderedContent, Professional, Service, Testimonial
from cms.serializers.content import (
    AboutFeatureSerializer,
    FaqSerializer,
    InsurerSerializer,
    ProfessionalSerializer,
    ServiceSerializer,
    TestimonialSerializer,
)
from cms.services import seeds
from cms.services.store import OrderedStore

FALLBACK_SEED = 'seed'
FALLBACK_EMPTY = 'empty'


@dataclass(frozen=True)
class ListSpec:
    kind: str
    model: Type[OrderedContent]
    serializer: Type[serializers.ModelSerializer]
    fallback: str = FALLBACK_EMPTY
    seed_rows: Optional[List[dict]] = None

    def store(self, nulls: Optional[str] = None) -> OrderedStore:
        return OrderedStore(self.model, nulls=nulls)

    def fallback_records(self) -> List[dict]:
        if self.fallback == FALLBACK_SEED and self.seed_rows:
            return seeds.as_records(self.seed_rows)
        return []


LISTS: Dict[str, ListSpec] = {
    spec.kind: spec for spec in (
        ListSpec('professionals', Professional, ProfessionalSerializer),
        ListSpec('services', Service, ServiceSerializer, FALLBACK_SEED, seeds.SERVICES),
        ListSpec('testimonials', Testimonial, TestimonialSerializer),
        ListSpec('about-features', AboutFeature, AboutFeatureSerializer, FALLBACK_SEED, seeds.ABOUT_FEATURES),
        ListSpec('faqs', Faq, FaqSerializer, FALLBACK_SEED, seeds.FAQS),
        ListSpec('insurers', Insurer, InsurerSerializer),
    )
}


def get_list(kind: str) -> ListSpec:
    spec = LISTS.get(kind)
    if spec is None:
        raise RecordNotFound(kind, message=f'unknown list "{kind}"')
    return spec
