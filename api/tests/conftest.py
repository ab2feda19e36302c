import pytest
from sqlalchemy import text

from matcher import models  # noqa: F401
from matcher import repo
from matcher.database import Base, make_engine, make_session_factory


class Store:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def add_people(self, *person_ids: int) -> None:
        with self.session_factory() as db:
            for person_id in person_ids:
                db.execute(
                    text("INSERT INTO person (id, name, email) VALUES (:id, :name, :email)"),
                    {"id": person_id, "name": f"P{person_id}", "email": f"p{person_id}@example.com"},
                )
            db.commit()

    def sign_up(self, *person_ids: int) -> None:
        with self.session_factory() as db:
            for person_id in person_ids:
                repo.add_waiting_entry(db, person_id)
            db.commit()

    def set_edges(self, edges: dict[tuple[int, int], int]) -> None:
        with self.session_factory() as db:
            for (person_a_id, person_b_id), weight in edges.items():
                repo.upsert_edge_weight(db, person_a_id, person_b_id, weight)
            db.commit()

    def waiting_ids(self) -> list[int]:
        with self.session_factory() as db:
            return sorted(int(r["person_id"]) for r in repo.list_waiting_entries(db))

    def edges(self) -> dict[tuple[int, int], int]:
        with self.session_factory() as db:
            return {(r["person_a_id"], r["person_b_id"]): r["weight"] for r in repo.list_edges(db)}

    def generation_count(self) -> int:
        with self.session_factory() as db:
            return repo.count_generations(db)

    def matches(self, generation_id: int) -> list[dict]:
        with self.session_factory() as db:
            return repo.list_matches(db, generation_id)


@pytest.fixture()
def store(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'matcher.sqlite'}")
    Base.metadata.create_all(bind=engine)
    yield Store(make_session_factory(engine))
    engine.dispose()
