# backend/modules/delivery/routes/delivery_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.database import get_db
from ..schemas.delivery_schemas import (
    DeliveryQuoteOut,
    DeliveryZoneCreate,
    DeliveryZoneOut,
)
from ..services import delivery_zone_service

router = APIRouter(tags=["Delivery"])


@router.get("/delivery-zones", response_model=List[DeliveryZoneOut])
async def list_delivery_zones(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
):
    if include_inactive:
        return await delivery_zone_service.list_zones(db)
    return await delivery_zone_service.list_active_zones(db)


@router.post(
    "/delivery-zones",
    response_model=DeliveryZoneOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_delivery_zone(
    zone_data: DeliveryZoneCreate, db: Session = Depends(get_db)
):
    return await delivery_zone_service.create_zone(db, zone_data)


@router.get("/delivery/quote", response_model=DeliveryQuoteOut)
async def get_delivery_quote(
    lat: Optional[float] = Query(None, description="Destination latitude"),
    lon: Optional[float] = Query(None, description="Destination longitude"),
    db: Session = Depends(get_db),
):
    """Preview the distance and fee a delivery order would be charged"""
    quote = await delivery_zone_service.quote_delivery(db, lat, lon)
    return DeliveryQuoteOut(
        distance_km=quote.distance_km,
        delivery_fee=float(quote.delivery_fee),
        deliverable=quote.deliverable,
        zone=DeliveryZoneOut.model_validate(quote.zone) if quote.zone else None,
    )
