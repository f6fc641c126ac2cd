"""
Database Infrastructure Package for Cowork Sessions

Exports database utilities and dependency providers.
"""

from cowork.infrastructure.db.database import (
    DatabaseManager,
    build_database_url,
    get_db_manager,
    get_session,
    get_session_context,
    init_db,
    close_db,
)

from cowork.infrastructure.db.dependencies import (
    SessionDep,
    get_user_repository,
    get_session_repository,
    get_subscription_repository,
    get_plan_repository,
    UserRepoDep,
    SessionRepoDep,
    SubscriptionRepoDep,
    PlanRepoDep,
)


__all__ = [
    # Database management
    "DatabaseManager",
    "build_database_url",
    "get_db_manager",
    "get_session",
    "get_session_context",
    "init_db",
    "close_db",
    # Dependencies
    "SessionDep",
    "get_user_repository",
    "get_session_repository",
    "get_subscription_repository",
    "get_plan_repository",
    "UserRepoDep",
    "SessionRepoDep",
    "SubscriptionRepoDep",
    "PlanRepoDep",
]
