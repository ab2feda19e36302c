from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import DateTime, bindparam, text

_TS = DateTime(timezone=True)

# Arbitrary constant shared by every worker process that can trigger a round.
ROUND_LOCK_KEY = 7_310_452


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _ts_param(name: str):
    return bindparam(name, type_=_TS)


# Person store boundary. Registration owns these rows; the core only reads them.


def person_exists(db, person_id: int) -> bool:
    row = db.execute(text("SELECT 1 AS ok FROM person WHERE id=:id"), {"id": person_id}).first()
    return row is not None


def list_person_ids(db, ids: Iterable[int]) -> set[int]:
    ids = list(ids)
    if not ids:
        return set()
    rows = db.execute(
        text("SELECT id FROM person WHERE id IN :ids").bindparams(bindparam("ids", expanding=True)),
        {"ids": ids},
    ).all()
    return {int(r[0]) for r in rows}


def list_people(db) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT p.id, p.name, p.email,
                   CASE WHEN w.person_id IS NULL THEN 0 ELSE 1 END AS waiting
            FROM person p
            LEFT JOIN waiting_entry w ON w.person_id = p.id
            ORDER BY p.id
            """
        )
    ).mappings().all()
    return [{**dict(r), "waiting": bool(r["waiting"])} for r in rows]


# Waiting set


def get_waiting_entry(db, person_id: int) -> dict[str, Any] | None:
    row = db.execute(
        text("SELECT person_id, signup_time FROM waiting_entry WHERE person_id=:person_id").columns(signup_time=_TS),
        {"person_id": person_id},
    ).mappings().first()
    return dict(row) if row else None


def add_waiting_entry(db, person_id: int, signup_time: datetime | None = None) -> bool:
    res = db.execute(
        text(
            """
            INSERT INTO waiting_entry (person_id, signup_time)
            VALUES (:person_id, :signup_time)
            ON CONFLICT (person_id) DO NOTHING
            """
        ).bindparams(_ts_param("signup_time")),
        {"person_id": person_id, "signup_time": signup_time or _now_utc()},
    )
    return bool(res.rowcount)


def remove_waiting_entry(db, person_id: int) -> bool:
    res = db.execute(text("DELETE FROM waiting_entry WHERE person_id=:person_id"), {"person_id": person_id})
    return bool(res.rowcount)


def delete_waiting_entries(db, person_ids: Iterable[int]) -> int:
    ids = list(person_ids)
    if not ids:
        return 0
    res = db.execute(
        text("DELETE FROM waiting_entry WHERE person_id IN :ids").bindparams(bindparam("ids", expanding=True)),
        {"ids": ids},
    )
    return int(res.rowcount or 0)


def list_waiting_entries(db) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT person_id, signup_time
            FROM waiting_entry
            ORDER BY signup_time ASC, person_id ASC
            """
        ).columns(signup_time=_TS)
    ).mappings().all()
    return [dict(r) for r in rows]


# Edges


def fetch_edges_among(db, person_ids: Iterable[int]) -> list[dict[str, Any]]:
    ids = list(person_ids)
    if len(ids) < 2:
        return []
    rows = db.execute(
        text(
            """
            SELECT person_a_id, person_b_id, weight
            FROM edge
            WHERE person_a_id IN :ids_a
              AND person_b_id IN :ids_b
            ORDER BY person_a_id, person_b_id
            """
        ).bindparams(bindparam("ids_a", expanding=True), bindparam("ids_b", expanding=True)),
        {"ids_a": ids, "ids_b": ids},
    ).mappings().all()
    return [dict(r) for r in rows]


def list_edges(db) -> list[dict[str, Any]]:
    rows = db.execute(
        text("SELECT person_a_id, person_b_id, weight FROM edge ORDER BY person_a_id, person_b_id")
    ).mappings().all()
    return [dict(r) for r in rows]


def upsert_edge_weight(db, person_a_id: int, person_b_id: int, weight: int) -> None:
    if person_a_id >= person_b_id:
        raise ValueError(f"Edge must be stored as (smaller, larger), got ({person_a_id}, {person_b_id})")
    db.execute(
        text(
            """
            INSERT INTO edge (person_a_id, person_b_id, weight)
            VALUES (:person_a_id, :person_b_id, :weight)
            ON CONFLICT (person_a_id, person_b_id)
            DO UPDATE SET weight = excluded.weight
            """
        ),
        {"person_a_id": person_a_id, "person_b_id": person_b_id, "weight": weight},
    )


# Generations and matches


def acquire_round_lock(db) -> None:
    """Serialize triggers across processes for the rest of the transaction (PostgreSQL only)."""
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": ROUND_LOCK_KEY})


def next_generation_id(db) -> int:
    row = db.execute(text("SELECT COALESCE(MAX(id), 0) + 1 AS next_id FROM generation")).mappings().first()
    return int(row["next_id"])


def insert_generation(db, generation_id: int, created_at: datetime) -> None:
    db.execute(
        text("INSERT INTO generation (id, created_at) VALUES (:id, :created_at)").bindparams(_ts_param("created_at")),
        {"id": generation_id, "created_at": created_at},
    )


def insert_match(db, generation_id: int, person1_id: int, person2_id: int | None) -> None:
    db.execute(
        text(
            """
            INSERT INTO round_match (generation_id, person1_id, person2_id)
            VALUES (:generation_id, :person1_id, :person2_id)
            """
        ),
        {"generation_id": generation_id, "person1_id": person1_id, "person2_id": person2_id},
    )


def get_generation(db, generation_id: int) -> dict[str, Any] | None:
    row = db.execute(
        text("SELECT id, created_at FROM generation WHERE id=:id").columns(created_at=_TS),
        {"id": generation_id},
    ).mappings().first()
    return dict(row) if row else None


def get_latest_generation(db) -> dict[str, Any] | None:
    row = db.execute(
        text("SELECT id, created_at FROM generation ORDER BY id DESC LIMIT 1").columns(created_at=_TS)
    ).mappings().first()
    return dict(row) if row else None


def count_generations(db) -> int:
    return int(db.execute(text("SELECT COUNT(1) FROM generation")).scalar() or 0)


def list_matches(db, generation_id: int) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT m.generation_id,
                   m.person1_id, p1.name AS person1_name,
                   m.person2_id, p2.name AS person2_name
            FROM round_match m
            JOIN person p1 ON p1.id = m.person1_id
            LEFT JOIN person p2 ON p2.id = m.person2_id
            WHERE m.generation_id = :generation_id
            ORDER BY m.id ASC
            """
        ),
        {"generation_id": generation_id},
    ).mappings().all()
    return [dict(r) for r in rows]


def list_person_matches(db, person_id: int) -> list[dict[str, Any]]:
    rows = db.execute(
        text(
            """
            SELECT m.generation_id, g.created_at,
                   p.id AS partner_id, p.name AS partner_name
            FROM round_match m
            JOIN generation g ON g.id = m.generation_id
            LEFT JOIN person p
              ON p.id = CASE WHEN m.person1_id = :person_id THEN m.person2_id ELSE m.person1_id END
            WHERE m.person1_id = :person_id OR m.person2_id = :person_id
            ORDER BY m.generation_id DESC
            """
        ).columns(created_at=_TS),
        {"person_id": person_id},
    ).mappings().all()
    return [dict(r) for r in rows]
