"""
Hardware store read routes.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database.session import get_session
from app.models.hardware_store import HardwareStore

router = APIRouter(prefix="/api/hardware-stores", tags=["hardware-stores"])
logger = logging.getLogger("app.hardware_stores")


def store_to_dict(store: HardwareStore) -> Dict[str, Any]:
    return {
        "id": store.id,
        "storeCode": store.store_code,
        "storeName": store.store_name,
        "address": store.address,
        "city": store.city,
        "province": store.province,
        "contactPerson": store.contact_person,
        "phone": store.phone,
        "email": store.email,
        "creditLimit": str(store.credit_limit),
        "storeType": store.store_type,
        "isActive": store.is_active,
        "importSessionId": store.import_session_id,
        "createdAt": store.created_at.isoformat() if store.created_at else None,
    }


@router.get("")
async def list_hardware_stores(
    province: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_session),
) -> Dict[str, Any]:
    """
    List hardware stores.

    Args:
        province: Case-insensitive province filter
        limit: Page size
        offset: Page offset
        db: Database session

    Returns:
        Page of stores and total count
    """
    query = db.query(HardwareStore)
    if province:
        query = query.filter(func.lower(HardwareStore.province) == province.strip().lower())

    total = query.count()
    stores = query.order_by(HardwareStore.id).offset(offset).limit(limit).all()

    return {"status": "success", "stores": [store_to_dict(store) for store in stores], "total": total}


@router.get("/{store_id}")
async def get_hardware_store(store_id: int, db: Session = Depends(get_session)) -> Dict[str, Any]:
    store = db.query(HardwareStore).filter(HardwareStore.id == store_id).first()
    if not store:
        raise HTTPException(status_code=404, detail="Store not found")

    return store_to_dict(store)
