# backend/modules/orders/__init__.py

"""
Order creation, status transitions, history and deletion.
"""
