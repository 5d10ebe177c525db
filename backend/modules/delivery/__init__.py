# backend/modules/delivery/__init__.py

"""
Delivery distance and zone pricing.
"""
