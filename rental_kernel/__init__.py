"""
Rental Kernel - shared foundations for the rental contract engine.

Provides:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock, Money/Currency value objects, workflow value types
- SQLAlchemy declarative base and engine/session management
"""

__version__ = "0.1.0"
