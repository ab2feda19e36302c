from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError

from .. import repo
from ..config import EDGE_WEIGHT_INCREMENT, MATCHING_TIMEOUT_SECONDS, TRIGGER_LOCK_TIMEOUT_SECONDS
from ..errors import (
    EmptyPoolError,
    InfeasibleError,
    InsufficientParticipants,
    InternalError,
    StaleSnapshotError,
    TriggerAborted,
    UnknownPersonError,
)
from .affinity import AffinityGraph, Weight, reinforced_weights
from .matching import Matching, min_weight_matching
from .state_machine import IDLE, can_cancel, transition_round

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RoundResult:
    generation_id: int
    created_at: datetime
    pairs: list[tuple[int, int]]
    leftover: int | None
    total_weight: Weight
    dropped_ids: list[int] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "generation_id": self.generation_id,
            "created_at": self.created_at.isoformat(),
            "pairs": [list(p) for p in self.pairs],
            "leftover": self.leftover,
            "total_weight": self.total_weight,
        }


class RoundController:
    """Runs "trigger matching" end to end, one round at a time.

    The waiting set and its edges are read once, the pairing is computed on a
    worker thread, and the generation, match rows, edge weights and waiting
    removals are written in the same transaction. Nothing is written unless
    the whole commit succeeds.

    Rounds from one controller are serialized by an in-process lock. Several
    controllers may share a store (the server plus ``scripts/run_round.py``):
    PostgreSQL serializes them with an advisory lock, and on any backend the
    commit first claims the matched waiting entries and raises
    ``StaleSnapshotError`` if another round got to them first.
    """

    def __init__(
        self,
        session_factory: Callable[[], Any],
        *,
        weight_increment: int = EDGE_WEIGHT_INCREMENT,
        lock_timeout: float = TRIGGER_LOCK_TIMEOUT_SECONDS,
        matching_timeout: float = MATCHING_TIMEOUT_SECONDS,
        matcher: Callable[..., Matching] = min_weight_matching,
        clock: Callable[[], datetime] = _now_utc,
    ) -> None:
        self.session_factory = session_factory
        self.weight_increment = weight_increment
        self.lock_timeout = lock_timeout
        self.matching_timeout = matching_timeout
        self.matcher = matcher
        self.clock = clock
        self.state = IDLE
        self._lock = threading.Lock()
        # Last matching started; it outlives its trigger when that trigger times out.
        self._inflight: Future | None = None

    def trigger(self, cancel: threading.Event | None = None) -> RoundResult:
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise TriggerAborted(f"another round still running after {self.lock_timeout}s")
        try:
            self.state = IDLE
            return self._run(cancel)
        finally:
            self._lock.release()

    def _advance(self, action: str) -> str:
        previous = self.state
        self.state = transition_round(previous, action)
        logger.debug("[ROUND] %s --%s--> %s", previous, action, self.state)
        return self.state

    def _check_cancel(self, cancel: threading.Event | None) -> None:
        if cancel is not None and cancel.is_set() and can_cancel(self.state):
            raise TriggerAborted("cancelled")

    def _compute(self, graph: AffinityGraph, leftover_order: list[int]) -> Matching:
        previous = self._inflight
        if previous is not None and not previous.done():
            logger.warning("[ROUND] waiting for a timed-out matching to finish")
            wait_futures([previous], timeout=self.lock_timeout)
            if not previous.done():
                raise TriggerAborted("a timed-out matching is still running")

        future: Future = Future()

        def work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.matcher(graph, leftover_order))
            except Exception as exc:
                future.set_exception(exc)

        # Daemon so a runaway matching never blocks interpreter exit.
        self._inflight = future
        threading.Thread(target=work, name="round-matching", daemon=True).start()
        try:
            return future.result(timeout=self.matching_timeout)
        except FutureTimeoutError:
            raise TriggerAborted(f"matching exceeded {self.matching_timeout}s for {len(graph)} participants")

    def _run(self, cancel: threading.Event | None) -> RoundResult:
        self._advance("start")
        with self.session_factory() as db:
            try:
                repo.acquire_round_lock(db)
                waiting_ids = [int(row["person_id"]) for row in repo.list_waiting_entries(db)]
                live_ids = repo.list_person_ids(db, waiting_ids)
                dropped_ids = sorted(set(waiting_ids) - live_ids)
                if dropped_ids:
                    logger.warning("[ROUND] waiting entries without a person will be purged: %s", dropped_ids)
                if len(live_ids) < 2:
                    raise InsufficientParticipants(len(live_ids))

                graph = AffinityGraph.build(live_ids, repo.fetch_edges_among(db, sorted(live_ids)))
                # Earliest sign-up first, so a carried-over leftover is the last to sit out again.
                leftover_order = [person_id for person_id in waiting_ids if person_id in live_ids]
                self._advance("snapshot")
                self._check_cancel(cancel)

                matching = self._compute(graph, leftover_order)
                self._check_cancel(cancel)
                self._advance("matched")

                result = self._commit(db, graph, matching, dropped_ids)
                db.commit()
                self._advance("commit")
            except (InsufficientParticipants, TriggerAborted) as exc:
                db.rollback()
                self._advance("fail")
                logger.info("[ROUND] aborted: %s", exc)
                raise
            except (EmptyPoolError, InfeasibleError):
                db.rollback()
                self._advance("fail")
                logger.exception("[ROUND] matching precondition violated")
                raise
            except SQLAlchemyError as exc:
                db.rollback()
                failed_in = self.state
                self._advance("fail")
                logger.warning("[ROUND] store failure during %s, rolled back: %s", failed_in, exc)
                raise InternalError(f"store failure during {failed_in}") from exc
            except Exception:
                db.rollback()
                self._advance("fail")
                raise

        logger.info(
            "[ROUND] committed generation_id=%s pairs=%s leftover=%s total_weight=%s",
            result.generation_id,
            len(result.pairs),
            result.leftover,
            result.total_weight,
        )
        return result

    def _commit(self, db, graph: AffinityGraph, matching: Matching, dropped_ids: list[int]) -> RoundResult:
        # Claim the matched entries before anything else. This is the first write,
        # so it also holds SQLite's write lock for the rest of the transaction.
        # The leftover keeps their entry and signup_time.
        matched = sorted(matching.matched_ids)
        if repo.delete_waiting_entries(db, matched) != len(matched):
            raise StaleSnapshotError(matched)
        if matching.leftover is not None and repo.get_waiting_entry(db, matching.leftover) is None:
            raise StaleSnapshotError([matching.leftover])
        repo.delete_waiting_entries(db, dropped_ids)

        created_at = self.clock()
        generation_id = repo.next_generation_id(db)
        repo.insert_generation(db, generation_id, created_at)

        for person1_id, person2_id in matching.pairs:
            repo.insert_match(db, generation_id, person1_id, person2_id)
        if matching.leftover is not None:
            repo.insert_match(db, generation_id, matching.leftover, None)

        for (person_a_id, person_b_id), weight in reinforced_weights(graph, matching.pairs, self.weight_increment).items():
            repo.upsert_edge_weight(db, person_a_id, person_b_id, weight)

        return RoundResult(
            generation_id=generation_id,
            created_at=created_at,
            pairs=list(matching.pairs),
            leftover=matching.leftover,
            total_weight=matching.total_weight,
            dropped_ids=dropped_ids,
        )


def view_round(db, generation_id: int | None = None) -> dict[str, Any] | None:
    generation = repo.get_latest_generation(db) if generation_id is None else repo.get_generation(db, generation_id)
    if not generation:
        return None
    return {
        "generation_id": int(generation["id"]),
        "created_at": generation["created_at"],
        "matches": repo.list_matches(db, int(generation["id"])),
    }


def person_history(db, person_id: int) -> list[dict[str, Any]]:
    if not repo.person_exists(db, person_id):
        raise UnknownPersonError(person_id)
    return repo.list_person_matches(db, person_id)
