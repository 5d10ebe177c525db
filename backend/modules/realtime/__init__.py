# backend/modules/realtime/__init__.py

"""
Dashboard fan-out over a single WebSocket channel.
"""
