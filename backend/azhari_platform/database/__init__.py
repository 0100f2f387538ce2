from azhari_platform.database.session import (
    build_engine,
    create_database_session,
    get_db_session,
    get_engine,
)

__all__ = [
    "build_engine",
    "create_database_session",
    "get_db_session",
    "get_engine",
]
