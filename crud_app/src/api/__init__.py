"""
Users & Tasks REST backend package.

Build the ASGI application with ``src.api.main.create_app`` or start a server
with ``python -m src.api``.
"""
