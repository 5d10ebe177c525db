# backend/modules/customers/__init__.py

"""
Customers keyed by phone number, with running order totals.
"""
