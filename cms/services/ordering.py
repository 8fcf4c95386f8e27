"""
Ordered list maintenance: normalization and adjacent swaps.

Lists are displayed sorted by ``order`` (nulls last by default) with the
record label as tie-break.  Two operations change ``order`` values:

* :class:`Normalizer` rewrites a list to a dense ``1..N`` sequence in its
  current display order whenever a record has no order (null or zero) or
  two records share one.
* :class:`Mover` moves the record at a display position one step up or
  down by exchanging its order value with the neighbour's.

A move holds a per-record lock in the shared cache for its whole
duration, so a second request for the same record is rejected instead of
interleaving with the first.  With ``CMS_ORDERING['ATOMIC_SWAP']`` the two
writes run in one transaction, each conditioned on the value read just
before; otherwise they run one after the other and a failed second write
is compensated by restoring the first record.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from django.core.cache import cache

from cms.errors import CmsError, MoveInProgress, MoveRejected, RecordNotFound, SchemaFieldMissing
from cms.models import OrderedContent
from cms.services.store import OrderedStore, ordering_settings

logger = logging.getLogger(__name__)

UP = 'up'
DOWN = 'down'


def needs_normalization(records: Sequence[OrderedContent]) -> bool:
    orders = [r.order for r in records]
    if any(not o for o in orders):
        return True
    return len(set(orders)) != len(orders)


@dataclass
class NormalizeResult:
    changed: int
    records: List[OrderedContent]


class Normalizer:
    def __init__(self, store: OrderedStore):
        self.store = store

    def normalize(self, records: Optional[List[OrderedContent]] = None) -> NormalizeResult:
        """Assign 1-based positions to every record of the list.

        Writes run one at a time in display order.  A write failing because
        the ``order`` column is missing is logged and skipped; any other
        failure aborts and propagates, leaving earlier writes in place.
        """
        if records is None:
            records = self.store.fetch_sorted()
        if not needs_normalization(records):
            return NormalizeResult(changed=0, records=records)

        changed = 0
        for position, record in enumerate(records, start=1):
            if record.order == position:
                continue
            try:
                self.store.write_order(record.pk, position)
            except SchemaFieldMissing:
                logger.warning(
                    "normalize skipped table=%s pk=%s: order column missing",
                    self.store.table, record.pk,
                )
                continue
            changed += 1

        logger.info("normalized table=%s rows=%s changed=%s", self.store.table, len(records), changed)
        return NormalizeResult(changed=changed, records=self.store.fetch_sorted())


class MoveLock:
    """Per-record move marker kept in the Django cache.

    ``cache.add`` only succeeds when the key is absent, which makes it an
    atomic test-and-set on both the local-memory and the Redis backends.
    """

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout if timeout is not None else ordering_settings()['LOCK_TIMEOUT']

    @staticmethod
    def key(table: str, pk: str) -> str:
        return f'cms:moving:{table}:{pk}'

    def is_held(self, table: str, pk: str) -> bool:
        return cache.get(self.key(table, pk)) is not None

    @contextmanager
    def hold(self, table: str, pk: str) -> Iterator[None]:
        key = self.key(table, pk)
        if not cache.add(key, 1, self.timeout):
            raise MoveInProgress(f'{table} record {pk} is already being moved')
        try:
            yield
        finally:
            cache.delete(key)


@dataclass
class MoveResult:
    moved: str
    swapped_with: str
    orders: Dict[str, int] = field(default_factory=dict)
    records: List[OrderedContent] = field(default_factory=list)


class Mover:
    def __init__(
        self,
        store: OrderedStore,
        *,
        normalizer: Optional[Normalizer] = None,
        lock: Optional[MoveLock] = None,
        atomic: Optional[bool] = None,
    ):
        self.store = store
        self.normalizer = normalizer or Normalizer(store)
        self.lock = lock or MoveLock()
        self.atomic = ordering_settings()['ATOMIC_SWAP'] if atomic is None else atomic

    def move_up(self, index: int, displayed: Optional[Sequence[str]] = None) -> MoveResult:
        return self.move(index, UP, displayed)

    def move_down(self, index: int, displayed: Optional[Sequence[str]] = None) -> MoveResult:
        return self.move(index, DOWN, displayed)

    def move(self, index: int, direction: str, displayed: Optional[Sequence[str]] = None) -> MoveResult:
        """Move the record shown at ``index`` one step in ``direction``.

        ``displayed`` is the list of ids in the order the caller shows them;
        when omitted the current sorted list is used.
        """
        if direction not in (UP, DOWN):
            raise MoveRejected(f'unknown direction {direction!r}')
        ids = list(displayed) if displayed is not None else [r.pk for r in self.store.fetch_sorted()]
        if len(set(ids)) != len(ids):
            raise MoveRejected('the displayed list repeats a record')
        if not 0 <= index < len(ids):
            raise MoveRejected(f'position {index} is outside the list')
        if direction == UP and index == 0:
            raise MoveRejected('already the first item')
        if direction == DOWN and index == len(ids) - 1:
            raise MoveRejected('already the last item')

        neighbour_index = index - 1 if direction == UP else index + 1
        current_id, neighbour_id = ids[index], ids[neighbour_index]

        with self.lock.hold(self.store.table, current_id):
            self.normalizer.normalize()
            fresh = self.store.fetch_minimal()
            current = fresh.get(current_id)
            neighbour = fresh.get(neighbour_id)
            if current is None:
                raise RecordNotFound(self.store.table, current_id)
            if neighbour is None:
                raise RecordNotFound(self.store.table, neighbour_id)

            # Position-derived values only cover records normalization could not reach
            current_order = current.order if current.order is not None else index + 1
            neighbour_order = neighbour.order if neighbour.order is not None else neighbour_index + 1

            if self.atomic:
                with self.store.atomic():
                    self.store.write_order(current_id, neighbour_order, expected=current.order)
                    self.store.write_order(neighbour_id, current_order, expected=neighbour.order)
            else:
                self._swap_sequential(current_id, current_order, neighbour_id, neighbour_order)

        logger.info(
            "moved table=%s pk=%s %s: %s<->%s orders %s<->%s",
            self.store.table, current_id, direction, current_id, neighbour_id,
            current_order, neighbour_order,
        )
        return MoveResult(
            moved=current_id,
            swapped_with=neighbour_id,
            orders={current_id: neighbour_order, neighbour_id: current_order},
            records=self.store.fetch_sorted(),
        )

    def _swap_sequential(self, current_id: str, current_order: int, neighbour_id: str, neighbour_order: int) -> None:
        self.store.write_order(current_id, neighbour_order)
        try:
            self.store.write_order(neighbour_id, current_order)
        except CmsError:
            self._restore(current_id, current_order)
            raise

    def _restore(self, pk: str, order: int) -> None:
        try:
            self.store.write_order(pk, order)
        except CmsError:
            logger.error(
                "compensating write failed table=%s pk=%s order=%s",
                self.store.table, pk, order, exc_info=True,
            )
        else:
            logger.warning("compensating write restored table=%s pk=%s order=%s", self.store.table, pk, order)
