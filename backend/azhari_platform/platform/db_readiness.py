"""Schema readiness checks for the tables every request path depends on."""

import logging
from dataclasses import dataclass
from typing import Iterable, List

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from azhari_platform.platform.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

# Session resolution, entitlement evaluation and the expiry job.
REQUIRED_TABLES = (
    "profiles",
    "subjects",
    "subscriptions",
    "notifications",
)


@dataclass(frozen=True)
class DBReadinessResult:
    ready: bool
    missing_tables: List[str]
    checked_tables: List[str]


def check_required_tables(session: Session, required_tables: Iterable[str] = REQUIRED_TABLES) -> DBReadinessResult:
    checked = list(required_tables)
    try:
        inspector = inspect(session.get_bind())
        missing = [name for name in checked if not inspector.has_table(name)]
    except SQLAlchemyError as e:
        logger.exception("Failed checking table existence")
        raise UpstreamUnavailableError("Database not reachable", upstream="database") from e

    if missing:
        logger.warning("Required tables missing", extra={"missing_tables": missing})
    return DBReadinessResult(ready=not missing, missing_tables=missing, checked_tables=checked)
