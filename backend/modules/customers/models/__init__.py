# backend/modules/customers/models/__init__.py

from .customer_models import Customer, CustomerAddress

__all__ = ["Customer", "CustomerAddress"]
