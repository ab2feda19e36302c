import argparse
import random
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sqlalchemy import text

from matcher.database import SessionLocal
from matcher.main import init_db
from matcher.services.waiting import signup


def seed_people(db, n_people: int, waiting_ratio: float, seed: int, reset: bool) -> dict[str, int]:
    if reset:
        for table in ("round_match", "generation", "edge", "waiting_entry", "person"):
            db.execute(text(f"DELETE FROM {table}"))

    start = int(db.execute(text("SELECT COALESCE(MAX(id), 0) FROM person")).scalar() or 0) + 1
    rng = random.Random(seed)
    waiting = 0
    for person_id in range(start, start + n_people):
        db.execute(
            text("INSERT INTO person (id, name, email) VALUES (:id, :name, :email)"),
            {"id": person_id, "name": f"Person {person_id}", "email": f"person{person_id}@example.com"},
        )
        if rng.random() < waiting_ratio:
            signup(db, person_id)
            waiting += 1
    db.commit()
    return {"people_created": n_people, "signed_up": waiting, "first_id": start}


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo people and sign them up for the next round")
    parser.add_argument("--n-people", type=int, default=20)
    parser.add_argument("--waiting-ratio", type=float, default=1.0)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--reset", action="store_true")
    args = parser.parse_args()

    init_db()
    with SessionLocal() as db:
        summary = seed_people(db, args.n_people, args.waiting_ratio, args.seed, args.reset)

    print("Seed completed")
    for k, v in summary.items():
        print(f"- {k}: {v}")


if __name__ == "__main__":
    main()
