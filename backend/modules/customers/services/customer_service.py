# backend/modules/customers/services/customer_service.py

from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from decimal import Decimal
import logging

from core.database_utils import atomic
from core.exceptions import NotFoundError
from modules.orders.models.order_models import Order
from ..models.customer_models import Customer, CustomerAddress
from ..schemas.customer_schemas import CustomerAddressCreate

logger = logging.getLogger(__name__)


class CustomerService:
    """Customer lookup, running totals and saved addresses"""

    def __init__(self, db: Session):
        self.db = db

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    def get_customer_by_phone(self, phone: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.phone == phone).first()

    def find_or_create_customer(
        self, name: str, phone: str, email: Optional[str] = None
    ) -> Customer:
        """
        Return the customer for ``phone``, creating it if needed.

        Runs inside the caller's transaction and only flushes. The latest
        name wins; an email is only overwritten when a new one is given.
        """
        customer = self.get_customer_by_phone(phone)
        if customer is None:
            customer = Customer(
                name=name, phone=phone, email=email,
                total_orders=0, total_spent=Decimal("0"),
            )
            self.db.add(customer)
            self.db.flush()
            logger.info(f"Created customer {customer.id} for new phone number")
            return customer

        customer.name = name
        if email:
            customer.email = email
        return customer

    def record_order(self, customer: Customer, order_total: Decimal) -> Customer:
        """Add one order to the customer's running totals"""
        customer.total_orders = (customer.total_orders or 0) + 1
        customer.total_spent = Decimal(customer.total_spent or 0) + order_total
        return customer

    def list_customers(self, limit: int = 100, offset: int = 0) -> List[Dict[str, Any]]:
        """Customers with their most recent order time, most recent first"""
        last_order = (
            self.db.query(
                Order.customer_id.label("customer_id"),
                func.max(Order.created_at).label("last_order_at"),
            )
            .group_by(Order.customer_id)
            .subquery()
        )

        rows = (
            self.db.query(Customer, last_order.c.last_order_at)
            .outerjoin(last_order, last_order.c.customer_id == Customer.id)
            .order_by(
                last_order.c.last_order_at.is_(None),
                last_order.c.last_order_at.desc(),
                Customer.id.desc(),
            )
            .offset(offset)
            .limit(limit)
            .all()
        )

        return [
            {
                "id": customer.id,
                "name": customer.name,
                "phone": customer.phone,
                "email": customer.email,
                "total_orders": customer.total_orders,
                "total_spent": customer.total_spent,
                "created_at": customer.created_at,
                "last_order_at": last_order_at,
            }
            for customer, last_order_at in rows
        ]

    def add_address(
        self, customer_id: int, address_data: CustomerAddressCreate
    ) -> CustomerAddress:
        """Save an address; the first or a default address becomes the only default"""
        self.get_customer(customer_id)

        is_first_address = self.db.query(CustomerAddress).filter(
            CustomerAddress.customer_id == customer_id
        ).count() == 0

        address = CustomerAddress(customer_id=customer_id, **address_data.model_dump())

        with atomic(self.db, "add customer address"):
            if is_first_address or address_data.is_default:
                self.db.query(CustomerAddress).filter(
                    CustomerAddress.customer_id == customer_id,
                    CustomerAddress.is_default.is_(True),
                ).update({"is_default": False}, synchronize_session=False)
                address.is_default = True

            self.db.add(address)

        self.db.refresh(address)
        logger.info(f"Added address {address.id} for customer {customer_id}")
        return address

    def get_addresses(self, customer_id: int) -> List[CustomerAddress]:
        """Saved addresses, default first"""
        self.get_customer(customer_id)
        return (
            self.db.query(CustomerAddress)
            .filter(CustomerAddress.customer_id == customer_id)
            .order_by(CustomerAddress.is_default.desc(), CustomerAddress.id.asc())
            .all()
        )
