# backend/lunchbell/__init__.py
"""
Lunchbell backend application package.

This package contains:
- main: FastAPI application entrypoint
- registration: SMS webhook command parsing and /users, /gcm endpoints
- subscribers: subscriber registry and snapshot persistence
- notifications: channel binding client, channel senders and dispatcher
- menu: today's menu readiness gate and refresh schedule
"""
