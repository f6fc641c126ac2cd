# API Routes Module
from cowork.api.routes import (
    sessions,
    customers,
    subscriptions,
)

__all__ = [
    "sessions",
    "customers",
    "subscriptions",
]
