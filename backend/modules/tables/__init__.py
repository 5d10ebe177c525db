# backend/modules/tables/__init__.py

"""
Table sessions, table payments and cart drafts.
"""
