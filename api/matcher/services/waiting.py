import logging
from datetime import datetime, timezone
from typing import Any

from .. import repo
from ..errors import DuplicateError, UnknownPersonError

logger = logging.getLogger(__name__)


def signup(db, person_id: int, *, idempotent: bool = True, now: datetime | None = None) -> dict[str, Any]:
    """Add a person to the waiting set for the next round.

    A repeated sign-up never creates a second row. It returns the existing
    entry with ``created=False``, or raises ``DuplicateError`` when
    ``idempotent`` is off.
    """
    if not repo.person_exists(db, person_id):
        raise UnknownPersonError(person_id)

    created = repo.add_waiting_entry(db, person_id, now or datetime.now(timezone.utc))
    if not created:
        if not idempotent:
            raise DuplicateError(person_id)
        logger.debug("[WAITING] duplicate signup ignored person_id=%s", person_id)
    else:
        logger.info("[WAITING] signup person_id=%s", person_id)

    entry = repo.get_waiting_entry(db, person_id) or {"person_id": person_id, "signup_time": None}
    return {**entry, "created": created}


def withdraw(db, person_id: int) -> bool:
    if not repo.person_exists(db, person_id):
        raise UnknownPersonError(person_id)
    removed = repo.remove_waiting_entry(db, person_id)
    if removed:
        logger.info("[WAITING] withdraw person_id=%s", person_id)
    return removed


def list_waiting(db) -> list[dict[str, Any]]:
    return repo.list_waiting_entries(db)
