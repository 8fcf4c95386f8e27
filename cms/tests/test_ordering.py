"""
Reader, normalizer and mover behaviour on a real database table.

Professionals are used throughout; every ordered list shares the same
store and services.
"""
from types import SimpleNamespace

import pytest
from django.db import OperationalError, ProgrammingError

from cms.errors import (
    ConcurrentUpdate,
    MoveInProgress,
    MoveRejected,
    RecordNotFound,
    SchemaFieldMissing,
    TransportError,
)
from cms.models import Professional, Service
from cms.services.ordering import MoveLock, Mover, Normalizer, needs_normalization
from cms.services.store import NULLS_FIRST, NULLS_LAST, OrderedStore, classify_db_error, translate_errors

pytestmark = pytest.mark.django_db


def make(name, order=None):
    return Professional.objects.create(name=name, order=order)


def orders():
    return {p.name: p.order for p in Professional.objects.all()}


def names(records):
    return [r.name for r in records]


@pytest.fixture
def store():
    return OrderedStore(Professional)


@pytest.fixture
def abc():
    return make('A', 1), make('B', 2), make('C', 3)


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

def test_fetch_sorted_puts_unordered_records_last_by_default(store):
    make('A', 2), make('B'), make('C', 1), make('D')
    assert names(store.fetch_sorted()) == ['C', 'A', 'B', 'D']


def test_fetch_sorted_nulls_first_policy(store):
    make('A', 2), make('B'), make('C', 1), make('D')
    assert names(store.fetch_sorted(nulls=NULLS_FIRST)) == ['B', 'D', 'C', 'A']
    assert names(OrderedStore(Professional, nulls=NULLS_FIRST).fetch_sorted()) == ['B', 'D', 'C', 'A']


def test_fetch_sorted_breaks_ties_by_label(store):
    make('Zed', 1), make('Ana', 1), make('Bea', 2)
    records = store.fetch_sorted(nulls=NULLS_LAST)
    assert names(records) == ['Ana', 'Zed', 'Bea']
    values = [r.order for r in records]
    assert values == sorted(values)


def test_services_use_title_as_tie_break():
    Service.objects.create(title='Psiquiatria')
    Service.objects.create(title='Nutrição')
    assert [s.title for s in OrderedStore(Service).fetch_sorted()] == ['Nutrição', 'Psiquiatria']


def test_unknown_nulls_policy_is_rejected():
    with pytest.raises(ValueError):
        OrderedStore(Professional, nulls='middle')


def test_next_order_is_max_plus_one(store):
    assert store.next_order() == 1
    make('A', 3), make('B')
    assert store.next_order() == 4


def test_write_order_with_stale_expected_value(store, abc):
    a, _, _ = abc
    with pytest.raises(ConcurrentUpdate):
        store.write_order(a.pk, 5, expected=7)
    assert orders()['A'] == 1
    store.write_order(a.pk, 5, expected=1)
    assert orders()['A'] == 5


def test_write_order_on_missing_record(store):
    with pytest.raises(RecordNotFound):
        store.write_order('0' * 32, 1)


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

def test_missing_column_is_classified_as_schema_error():
    err = classify_db_error(OperationalError('no such column: cms_professional.order'), 'cms_professional')
    assert isinstance(err, SchemaFieldMissing)
    assert err.field == 'order'
    assert 'cms_professional' in err.setup
    assert 'ADD COLUMN' in err.setup
    assert err.as_payload()['setup'] == err.setup


def test_missing_relation_is_classified_as_schema_error():
    err = classify_db_error(ProgrammingError('relation "cms_service" does not exist'), 'cms_service')
    assert isinstance(err, SchemaFieldMissing)
    assert err.field is None
    assert 'migrate cms' in err.setup


def test_other_database_errors_are_transport_errors():
    err = classify_db_error(OperationalError('could not connect to server'), 'cms_service')
    assert isinstance(err, TransportError)
    assert err.status_code == 503


def test_translate_errors_raises_typed_error():
    with pytest.raises(SchemaFieldMissing) as info:
        with translate_errors('cms_faq'):
            raise OperationalError('Unknown column \'order\' in \'field list\'')
    assert isinstance(info.value.__cause__, OperationalError)


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------

def test_needs_normalization():
    rows = lambda *values: [SimpleNamespace(order=v) for v in values]
    assert not needs_normalization(rows(1, 2, 3))
    assert not needs_normalization([])
    assert needs_normalization(rows(1, None, 3))
    assert needs_normalization(rows(0, 1))
    assert needs_normalization(rows(1, 1, 2))


def test_normalize_assigns_alphabetical_positions(store):
    make('C'), make('A'), make('B')
    result = Normalizer(store).normalize()
    assert result.changed == 3
    assert orders() == {'A': 1, 'B': 2, 'C': 3}
    assert names(result.records) == ['A', 'B', 'C']


def test_normalize_is_idempotent(store):
    make('C'), make('A', 4), make('B')
    first = Normalizer(store).normalize()
    snapshot = orders()
    second = Normalizer(store).normalize()
    assert first.changed > 0
    assert second.changed == 0
    assert orders() == snapshot
    assert sorted(snapshot.values()) == [1, 2, 3]


def test_normalize_keeps_current_display_order(store):
    make('A', 2), make('B'), make('C', 1)
    result = Normalizer(store).normalize()
    assert orders() == {'C': 1, 'A': 2, 'B': 3}
    # C and A already sat at their positions
    assert result.changed == 1


def test_normalize_resolves_duplicate_orders(store):
    make('B', 5), make('A', 5), make('C', 7)
    Normalizer(store).normalize()
    assert orders() == {'A': 1, 'B': 2, 'C': 3}


def test_normalize_skips_records_when_column_is_missing(store, monkeypatch):
    _, b, _ = make('A'), make('B'), make('C')
    real = store.write_order

    def write(pk, order, **kwargs):
        if pk == b.pk:
            raise SchemaFieldMissing(store.table)
        return real(pk, order, **kwargs)

    monkeypatch.setattr(store, 'write_order', write)
    result = Normalizer(store).normalize()
    assert result.changed == 2
    assert orders() == {'A': 1, 'B': None, 'C': 3}


def test_normalize_aborts_on_other_errors(store, monkeypatch):
    make('A'), make('B'), make('C')
    real = store.write_order
    calls = []

    def write(pk, order, **kwargs):
        calls.append(order)
        if order == 2:
            raise TransportError('connection reset')
        return real(pk, order, **kwargs)

    monkeypatch.setattr(store, 'write_order', write)
    with pytest.raises(TransportError):
        Normalizer(store).normalize()
    assert calls == [1, 2]
    assert orders() == {'A': 1, 'B': None, 'C': None}


# ---------------------------------------------------------------------------
# Mover
# ---------------------------------------------------------------------------

def test_move_up_swaps_with_previous_record(store, abc):
    a, b, c = abc
    result = Mover(store).move_up(1)
    assert orders() == {'A': 2, 'B': 1, 'C': 3}
    assert names(result.records) == ['B', 'A', 'C']
    assert result.moved == b.pk
    assert result.swapped_with == a.pk
    assert result.orders == {b.pk: 1, a.pk: 2}


def test_move_down_swaps_with_next_record(store, abc):
    result = Mover(store).move_down(1)
    assert orders() == {'A': 1, 'B': 3, 'C': 2}
    assert names(result.records) == ['A', 'C', 'B']


@pytest.mark.parametrize('atomic', [True, False])
def test_move_up_then_down_restores_orders(store, abc, atomic):
    mover = Mover(store, atomic=atomic)
    before = orders()
    mover.move_up(2)
    mover.move_down(1)
    assert orders() == before


def test_first_record_cannot_move_up(store, abc):
    with pytest.raises(MoveRejected):
        Mover(store).move_up(0)
    assert orders() == {'A': 1, 'B': 2, 'C': 3}


def test_last_record_cannot_move_down(store, abc):
    with pytest.raises(MoveRejected):
        Mover(store).move_down(2)
    assert orders() == {'A': 1, 'B': 2, 'C': 3}


def test_single_record_cannot_move(store):
    make('Solo', 1)
    mover = Mover(store)
    with pytest.raises(MoveRejected):
        mover.move_up(0)
    with pytest.raises(MoveRejected):
        mover.move_down(0)


def test_index_outside_list_is_rejected(store, abc):
    with pytest.raises(MoveRejected):
        Mover(store).move_down(7)


def test_move_normalizes_unordered_list_first(store):
    make('C'), make('A'), make('B')
    Mover(store).move_down(0)
    assert orders() == {'A': 2, 'B': 1, 'C': 3}


def test_move_follows_the_displayed_ids(store, abc):
    a, b, c = abc
    # caller shows C, A, B; moving A (index 1) up swaps it with C
    Mover(store).move_up(1, displayed=[c.pk, a.pk, b.pk])
    assert orders() == {'A': 3, 'B': 2, 'C': 1}


def test_move_rejects_repeated_ids(store, abc):
    a, b, _ = abc
    with pytest.raises(MoveRejected):
        Mover(store).move_up(1, displayed=[a.pk, a.pk])
    with pytest.raises(MoveRejected):
        Mover(store).move_down(0, displayed=[a.pk, b.pk, a.pk])
    assert orders() == {'A': 1, 'B': 2, 'C': 3}


def test_move_fails_when_neighbour_was_deleted(store, abc):
    a, b, c = abc
    with pytest.raises(RecordNotFound):
        Mover(store).move_up(1, displayed=['f' * 32, b.pk, c.pk])
    assert orders() == {'A': 1, 'B': 2, 'C': 3}
    assert not MoveLock().is_held(store.table, b.pk)


def test_move_rejected_while_record_is_locked(store, abc):
    _, b, _ = abc
    lock = MoveLock()
    with lock.hold(store.table, b.pk):
        with pytest.raises(MoveInProgress):
            Mover(store).move_up(1)
    assert not lock.is_held(store.table, b.pk)
    Mover(store).move_up(1)
    assert orders()['B'] == 1


def test_sequential_swap_restores_first_write_when_second_fails(store, abc, monkeypatch):
    a, b, _ = abc
    real = store.write_order

    def write(pk, order, **kwargs):
        if pk == a.pk:
            raise TransportError('connection reset')
        return real(pk, order, **kwargs)

    monkeypatch.setattr(store, 'write_order', write)
    with pytest.raises(TransportError):
        Mover(store, atomic=False).move_up(1)
    assert orders() == {'A': 1, 'B': 2, 'C': 3}
    assert not MoveLock().is_held(store.table, b.pk)


def test_atomic_swap_rolls_back_when_second_write_fails(store, abc, monkeypatch):
    a, _, _ = abc
    real = store.write_order

    def write(pk, order, **kwargs):
        if pk == a.pk:
            raise TransportError('connection reset')
        return real(pk, order, **kwargs)

    monkeypatch.setattr(store, 'write_order', write)
    with pytest.raises(TransportError):
        Mover(store, atomic=True).move_up(1)
    assert orders() == {'A': 1, 'B': 2, 'C': 3}


def test_atomic_swap_detects_concurrent_change(store, abc, monkeypatch):
    a, _, _ = abc
    real_fetch = store.fetch_minimal

    def fetch_then_someone_edits():
        snapshot = real_fetch()
        Professional.objects.filter(pk=a.pk).update(order=9)
        return snapshot

    monkeypatch.setattr(store, 'fetch_minimal', fetch_then_someone_edits)
    with pytest.raises(ConcurrentUpdate):
        Mover(store, atomic=True).move_up(1)
    assert orders() == {'A': 9, 'B': 2, 'C': 3}
