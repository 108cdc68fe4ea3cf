"""
Utility functions for the application.
"""
import hashlib
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

M = TypeVar('M')

_FRACTION = re.compile(r"\.(\d{6})\d+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse the timestamp shapes the platforms send back.

    Accepts epoch seconds (int/float/numeric str), ISO 8601 with ``Z``,
    ``+00:00`` or ``+0000`` offsets, and RFC 3339 with nanosecond fractions.
    Returns None when the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, (int, float)) or (isinstance(value, str) and value.isdigit()):
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    if not isinstance(value, str):
        return None

    text = _FRACTION.sub(r".\1", value.strip())
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in ("%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S.%f%z"):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    logger.debug(f"Unparseable timestamp: {value!r}")
    return None


def best_effort_id(*parts: Any) -> str:
    """
    Hash-based identity for reviews the platform exposes no stable id for.

    Two distinct reviews sharing every part collide; this is a best-effort
    identity, not a dedup key.
    """
    joined = "".join("" if part is None else str(part) for part in parts)
    return hashlib.md5(joined.encode("utf-8")).hexdigest()


def _identity_clause(model: Type[M], identity: Dict[str, Any]):
    clauses = []
    for key, value in identity.items():
        column = getattr(model, key)
        clauses.append(column.is_(None) if value is None else column == value)
    return clauses


async def upsert(
    db: AsyncSession,
    model: Type[M],
    identity: Dict[str, Any],
    values: Dict[str, Any],
) -> Tuple[M, bool]:
    """
    Insert-or-update a row keyed by its natural identity.

    The unique constraint on the identity columns is the only concurrency
    guard: if an overlapping sync inserts the same key first, the insert
    savepoint is rolled back and the existing row is updated instead.

    Returns:
        (instance, created)
    """
    stmt = select(model).where(*_identity_clause(model, identity))
    instance = (await db.execute(stmt)).scalars().first()

    if instance is None:
        instance = model(**identity, **values)
        try:
            async with db.begin_nested():
                db.add(instance)
            return instance, True
        except IntegrityError:
            logger.debug(f"Concurrent insert on {model.__name__} {identity}, updating instead")
            instance = (await db.execute(stmt)).scalars().one()

    for key, value in values.items():
        setattr(instance, key, value)
    await db.flush()
    return instance, False
