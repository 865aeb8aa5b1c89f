"""Inventory tracking API routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from shopfloor import alerts

from .. import models, schemas
from ..auth import get_current_user, require_admin
from ..database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/inventory", tags=["inventory"], dependencies=[Depends(get_current_user)]
)


def _serialize_item(item: models.InventoryItem) -> schemas.InventoryItemRead:
    return schemas.InventoryItemRead(
        id=item.id,
        name=item.name,
        description=item.description,
        quantity=item.quantity,
        threshold=item.threshold,
        status=alerts.stock_status(item.quantity, item.threshold),
    )


def _get_item_or_404(session: Session, item_id: int) -> models.InventoryItem:
    item = session.get(models.InventoryItem, item_id)
    if item is None:
        logger.warning("Inventory item %s not found", item_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return item


def _load_items(session: Session) -> list[models.InventoryItem]:
    return list(
        session.exec(select(models.InventoryItem).order_by(models.InventoryItem.id)).all()
    )


@router.get("", response_model=list[schemas.InventoryItemRead])
def list_inventory(session: Session = Depends(get_session)):
    items = _load_items(session)
    logger.debug("Sending %s inventory items", len(items))
    return [_serialize_item(item) for item in items]


@router.get("/low-stock", response_model=list[schemas.InventoryItemRead])
def list_low_stock(session: Session = Depends(get_session)):
    serialized = [_serialize_item(item) for item in _load_items(session)]
    return [item for item in serialized if item.status is alerts.StockStatus.LOW]


@router.post(
    "",
    response_model=schemas.InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def add_item(payload: schemas.InventoryItemCreate, session: Session = Depends(get_session)):
    item = models.InventoryItem(**payload.model_dump())
    session.add(item)
    session.commit()
    session.refresh(item)
    logger.info("Inventory item %s added: %s", item.id, item.name)
    return _serialize_item(item)


@router.put("/{item_id}", response_model=schemas.InventoryItemRead)
def update_item(
    item_id: schemas.RowId,
    payload: schemas.InventoryItemUpdate,
    session: Session = Depends(get_session),
):
    item = _get_item_or_404(session, item_id)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in updates.items():
        setattr(item, field, value)
    if updates:
        session.add(item)
        session.commit()
        session.refresh(item)
        logger.info("Inventory item %s updated: %s", item_id, sorted(updates))
    return _serialize_item(item)


@router.delete(
    "/{item_id}",
    response_model=schemas.InventoryItemRead,
    dependencies=[Depends(require_admin)],
)
def delete_item(item_id: schemas.RowId, session: Session = Depends(get_session)):
    item = _get_item_or_404(session, item_id)
    deleted = _serialize_item(item)
    session.delete(item)
    session.commit()
    logger.info("Inventory item %s deleted", item_id)
    return deleted
