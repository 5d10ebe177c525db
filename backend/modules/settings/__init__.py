# backend/modules/settings/__init__.py

"""
Restaurant-level settings stored as key/value rows.
"""
