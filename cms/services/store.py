"""
Data access for ordered content tables.

``OrderedStore`` is the only code that reads or writes the ``order``
column.  Database exceptions are translated here into the typed errors
of :mod:`cms.errors`, so callers branch on error kind instead of message
text.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Type

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F, Max
from django.utils import timezone

from cms.errors import (
    CmsError,
    ConcurrentUpdate,
    RecordNotFound,
    SchemaFieldMissing,
    TransportError,
)
from cms.models import OrderedContent

logger = logging.getLogger(__name__)

NULLS_FIRST = 'first'
NULLS_LAST = 'last'

# Fragments of backend messages that mean a column or table is absent:
# sqlite ("no such column"), MySQL ("Unknown column", "doesn't exist"),
# PostgreSQL ('column "order" does not exist', 'relation ... does not exist')
_SCHEMA_MARKERS = ('no such column', 'unknown column', 'no such table', "doesn't exist", 'does not exist')

_ANY = object()


def ordering_settings() -> dict:
    conf = {'NULLS': NULLS_LAST, 'ATOMIC_SWAP': True, 'LOCK_TIMEOUT': 30}
    conf.update(getattr(settings, 'CMS_ORDERING', {}) or {})
    return conf


def classify_db_error(exc: Exception, table: str) -> CmsError:
    """Map a database exception onto a cms error kind."""
    text = str(exc)
    lowered = text.lower()
    if any(marker in lowered for marker in _SCHEMA_MARKERS):
        is_column = 'column' in lowered or 'order' in lowered
        return SchemaFieldMissing(table, 'order' if is_column else None, message=text)
    return TransportError(text)


@contextmanager
def translate_errors(table: str) -> Iterator[None]:
    try:
        yield
    except DatabaseError as exc:
        err = classify_db_error(exc, table)
        logger.error("store error table=%s kind=%s: %s", table, err.code, exc)
        raise err from exc


@dataclass(frozen=True)
class OrderSnapshot:
    pk: str
    label: str
    order: Optional[int]


class OrderedStore:
    """Reads and writes one ordered list (one table)."""

    def __init__(self, model: Type[OrderedContent], *, nulls: Optional[str] = None):
        self.model = model
        self.table = model._meta.db_table
        self.label_field = model.label_field
        self.nulls = nulls or ordering_settings()['NULLS']
        if self.nulls not in (NULLS_FIRST, NULLS_LAST):
            raise ValueError(f'unknown nulls policy: {self.nulls!r}')

    @property
    def db(self) -> str:
        return self.model.objects.db

    def ordering(self, nulls: Optional[str] = None) -> list:
        """Return ``order_by`` arguments: order, then label, then id."""
        policy = nulls or self.nulls
        if policy == NULLS_FIRST:
            primary = F('order').asc(nulls_first=True)
        else:
            primary = F('order').asc(nulls_last=True)
        return [primary, self.label_field, 'pk']

    def fetch_sorted(self, nulls: Optional[str] = None) -> List[OrderedContent]:
        with translate_errors(self.table):
            return list(self.model.objects.order_by(*self.ordering(nulls)))

    def fetch_minimal(self) -> Dict[str, OrderSnapshot]:
        with translate_errors(self.table):
            rows = list(self.model.objects.values_list('pk', self.label_field, 'order'))
        return {pk: OrderSnapshot(pk=pk, label=label or '', order=order) for pk, label, order in rows}

    def get(self, pk: str) -> OrderedContent:
        with translate_errors(self.table):
            obj = self.model.objects.filter(pk=pk).first()
        if obj is None:
            raise RecordNotFound(self.table, pk)
        return obj

    def next_order(self) -> int:
        with translate_errors(self.table):
            current = self.model.objects.aggregate(m=Max('order'))['m']
        return int(current or 0) + 1

    def write_order(self, pk: str, order: int, *, expected=_ANY) -> None:
        """Set ``order`` on one record.

        With ``expected`` the update only applies while the stored value
        still equals it; a mismatch raises :class:`ConcurrentUpdate`.
        """
        qs = self.model.objects.filter(pk=pk)
        if expected is not _ANY:
            qs = qs.filter(order__isnull=True) if expected is None else qs.filter(order=expected)
        with translate_errors(self.table):
            updated = qs.update(order=order, updated_at=timezone.now())
            if updated:
                return
            exists = self.model.objects.filter(pk=pk).exists()
        if exists:
            raise ConcurrentUpdate(
                f'{self.table} record {pk} changed order before the swap (expected {expected})'
            )
        raise RecordNotFound(self.table, pk)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with translate_errors(self.table):
            with transaction.atomic(using=self.db):
                yield
