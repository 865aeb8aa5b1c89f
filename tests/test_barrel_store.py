import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

sys.path.append(str(Path(__file__).resolve().parents[1]))

from shopfloor.alerts import BarrelCategory
from shopfloor_web import models
from shopfloor_web.barrels import BarrelRegistry, BarrelStore, RemovalOutcome, evaluate_all
from shopfloor_web.database import Database
from shopfloor_web.errors import InvalidArgument, NotFound, StorageFailure
from shopfloor_web.seed import seed_barrels


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'barrels.db'}")
    db.init_db()
    with db.session_scope() as session:
        seed_barrels(session)
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    with database.session_scope() as session:
        yield session


def _type_id(session, name):
    return session.exec(select(models.BarrelType.id).where(models.BarrelType.name == name)).one()


def test_seeded_catalogue(session):
    registry = BarrelRegistry(session)
    types = registry.list_types()
    assert [t.name for t in types] == ["Chips", "Vacuum", "Coolant", "Oil"]
    assert types[0].category is BarrelCategory.ACCUMULATING
    assert types[2].category is BarrelCategory.DEPLETING

    store = BarrelStore(session)
    counts = {t.name: len(store.list_units(t.id)) for t in types}
    assert counts == {"Chips": 3, "Vacuum": 2, "Coolant": 4, "Oil": 3}


def test_seed_is_idempotent(database):
    with database.session_scope() as session:
        assert seed_barrels(session) == 0
        assert len(BarrelRegistry(session).list_types()) == 4


def test_add_then_remove_restores_count(session):
    store = BarrelStore(session)
    type_id = _type_id(session, "Chips")
    before = store.count_units(type_id)

    unit = store.add_unit(type_id)
    unit_id = unit.id
    assert unit.filled is False
    assert store.count_units(type_id) == before + 1

    assert store.remove_one_unit(type_id) is RemovalOutcome.REMOVED
    assert store.count_units(type_id) == before
    assert unit_id not in [u.id for u in store.list_units(type_id)]


def test_remove_takes_highest_id_regardless_of_fill_state(session):
    store = BarrelStore(session)
    type_id = _type_id(session, "Oil")
    units = store.list_units(type_id)
    store.set_filled(units[-1].id, True)
    newest = units[-1].id

    store.remove_one_unit(type_id)

    remaining = [u.id for u in store.list_units(type_id)]
    assert newest not in remaining
    assert remaining == [u.id for u in units[:-1]]


def test_remove_on_empty_type_is_a_no_op(session):
    store = BarrelStore(session)
    type_id = _type_id(session, "Vacuum")
    for _ in range(store.count_units(type_id)):
        store.remove_one_unit(type_id)
    assert store.count_units(type_id) == 0

    assert store.remove_one_unit(type_id) is RemovalOutcome.NOT_FOUND
    assert store.count_units(type_id) == 0


def test_concurrent_decrements_never_lose_a_count(database):
    workers = 8
    remaining = 2
    with database.session_scope() as session:
        store = BarrelStore(session)
        type_id = _type_id(session, "Chips")
        for _ in range(workers + remaining - store.count_units(type_id)):
            store.add_unit(type_id)
        assert store.count_units(type_id) == workers + remaining

    start = threading.Barrier(workers)

    def decrement():
        with database.session_scope() as session:
            start.wait(timeout=10)
            return BarrelStore(session).remove_one_unit(type_id)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda _: decrement(), range(workers)))

    assert outcomes == [RemovalOutcome.REMOVED] * workers
    with database.session_scope() as session:
        assert BarrelStore(session).count_units(type_id) == remaining


def test_removal_only_touches_requested_type(session):
    store = BarrelStore(session)
    chips = _type_id(session, "Chips")
    coolant = _type_id(session, "Coolant")
    coolant_before = store.count_units(coolant)
    store.add_unit(coolant)

    store.remove_one_unit(chips)

    assert store.count_units(coolant) == coolant_before + 1


def test_set_filled_is_reversible(session):
    store = BarrelStore(session)
    unit = store.list_units(_type_id(session, "Coolant"))[0]
    original = unit.filled

    assert store.set_filled(unit.id, True).filled is True
    assert store.set_filled(unit.id, False).filled is False
    assert store.get_unit(unit.id).filled is original


def test_unknown_ids_raise_not_found(session):
    store = BarrelStore(session)
    with pytest.raises(NotFound):
        store.add_unit(999)
    with pytest.raises(NotFound):
        store.remove_one_unit(999)
    with pytest.raises(NotFound):
        store.set_filled(999, True)
    with pytest.raises(NotFound):
        store.delete_unit(999)
    with pytest.raises(NotFound):
        store.list_units(999)
    with pytest.raises(NotFound):
        store.registry.set_threshold(999, 1)


def test_negative_threshold_is_rejected_without_mutation(session):
    registry = BarrelRegistry(session)
    type_id = _type_id(session, "Coolant")

    with pytest.raises(InvalidArgument):
        registry.set_threshold(type_id, -1)

    assert registry.get_type(type_id).threshold == 2
    assert registry.set_threshold(type_id, 0).threshold == 0


def test_apply_count_validates_action(session):
    store = BarrelStore(session)
    type_id = _type_id(session, "Chips")
    before = store.count_units(type_id)

    with pytest.raises(InvalidArgument):
        store.apply_count(type_id, "double")

    store.apply_count(type_id, "increment")
    store.apply_count(type_id, "increment")
    store.apply_count(type_id, "decrement")
    assert store.count_units(type_id) == before + 1


def test_evaluate_all_reports_active_alerts(session):
    store = BarrelStore(session)
    chips = _type_id(session, "Chips")
    for unit in store.list_units(chips)[:2]:
        store.set_filled(unit.id, True)

    active = evaluate_all(store.registry.list_types(), store.units_by_type())

    # Freshly seeded depleting types are empty and therefore alert too.
    assert [alert.type for alert in active] == ["Chips", "Coolant", "Oil"]


def test_storage_errors_are_wrapped(session, monkeypatch):
    def broken_exec(*_args, **_kwargs):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(session, "exec", broken_exec)

    with pytest.raises(StorageFailure) as excinfo:
        BarrelRegistry(session).list_types()
    assert isinstance(excinfo.value.__cause__, OperationalError)
