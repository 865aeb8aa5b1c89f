"""Barrel counters, fill toggles and threshold API routes."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from shopfloor import alerts

from .. import models, schemas
from ..auth import get_current_user, require_admin
from ..barrels import BarrelRegistry, BarrelStore, evaluate_all
from ..database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/barrels", tags=["barrels"], dependencies=[Depends(get_current_user)]
)


def _serialize_alert(alert: Optional[alerts.Alert]) -> Optional[schemas.AlertRead]:
    if alert is None:
        return None
    return schemas.AlertRead(
        type_id=alert.type_id,
        type=alert.type,
        category=alert.category,
        filled_count=alert.filled_count,
        threshold=alert.threshold,
        message=alert.message,
    )


def _serialize_type(
    barrel_type: models.BarrelType, units: Sequence[models.BarrelUnit]
) -> schemas.BarrelTypeRead:
    return schemas.BarrelTypeRead(
        id=barrel_type.id,
        type=barrel_type.name,
        color=barrel_type.color,
        threshold=barrel_type.threshold,
        category=barrel_type.category,
        filled_count=alerts.filled_count(units),
        units=[
            schemas.BarrelUnitRead(id=unit.id, type_id=unit.type_id, filled=unit.filled)
            for unit in units
        ],
        alert=_serialize_alert(alerts.evaluate(barrel_type, units)),
    )


def _type_snapshot(session: Session, type_id: int) -> schemas.BarrelTypeRead:
    store = BarrelStore(session)
    barrel_type = store.registry.get_type(type_id)
    return _serialize_type(barrel_type, store.list_units(type_id))


@router.get("", response_model=list[schemas.BarrelTypeRead])
def list_barrels(session: Session = Depends(get_session)):
    store = BarrelStore(session)
    types = store.registry.list_types()
    units = store.units_by_type()
    logger.debug("Listing %s barrel types", len(types))
    return [_serialize_type(barrel_type, units.get(barrel_type.id, [])) for barrel_type in types]


@router.get("/alerts", response_model=list[schemas.AlertRead])
def list_alerts(session: Session = Depends(get_session)):
    store = BarrelStore(session)
    active = evaluate_all(store.registry.list_types(), store.units_by_type())
    return [_serialize_alert(alert) for alert in active]


@router.get("/{type_id}", response_model=schemas.BarrelTypeRead)
def get_barrel_type(type_id: schemas.RowId, session: Session = Depends(get_session)):
    return _type_snapshot(session, type_id)


@router.post(
    "/{type_id}/units",
    response_model=schemas.BarrelUnitRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def add_unit(type_id: schemas.RowId, session: Session = Depends(get_session)):
    return BarrelStore(session).add_unit(type_id)


@router.put("/units/{unit_id}", response_model=schemas.BarrelUnitRead)
def update_unit(
    unit_id: schemas.RowId,
    payload: schemas.BarrelUnitUpdate,
    session: Session = Depends(get_session),
):
    return BarrelStore(session).set_filled(unit_id, payload.filled)


@router.delete(
    "/units/{unit_id}",
    response_model=schemas.SuccessResponse,
    dependencies=[Depends(require_admin)],
)
def delete_unit(unit_id: schemas.RowId, session: Session = Depends(get_session)):
    BarrelStore(session).delete_unit(unit_id)
    return schemas.SuccessResponse()


@router.put(
    "/{type_id}/count",
    response_model=schemas.BarrelTypeRead,
    dependencies=[Depends(require_admin)],
)
def update_count(
    type_id: schemas.RowId,
    payload: schemas.BarrelCountUpdate,
    session: Session = Depends(get_session),
):
    BarrelStore(session).apply_count(type_id, payload.action)
    return _type_snapshot(session, type_id)


@router.put(
    "/{type_id}/threshold",
    response_model=schemas.BarrelTypeRead,
    dependencies=[Depends(require_admin)],
)
def update_threshold(
    type_id: schemas.RowId,
    payload: schemas.BarrelThresholdUpdate,
    session: Session = Depends(get_session),
):
    BarrelRegistry(session).set_threshold(type_id, payload.threshold)
    return _type_snapshot(session, type_id)
