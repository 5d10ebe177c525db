# backend/modules/customers/routes/customer_routes.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from core.database import get_db
from ..schemas.customer_schemas import (
    CustomerAddressCreate,
    CustomerAddressOut,
    CustomerOut,
)
from ..services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("", response_model=List[CustomerOut])
async def list_customers(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Customers ordered by their most recent order"""
    return CustomerService(db).list_customers(limit=limit, offset=offset)


@router.get("/{customer_id}/addresses", response_model=List[CustomerAddressOut])
async def get_customer_addresses(customer_id: int, db: Session = Depends(get_db)):
    return CustomerService(db).get_addresses(customer_id)


@router.post(
    "/{customer_id}/addresses",
    response_model=CustomerAddressOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_customer_address(
    customer_id: int,
    address_data: CustomerAddressCreate,
    db: Session = Depends(get_db),
):
    return CustomerService(db).add_address(customer_id, address_data)
