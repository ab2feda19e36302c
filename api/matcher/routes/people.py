from fastapi import APIRouter, HTTPException

from ..errors import UnknownPersonError
from ..schemas import HistoryEntry, HistoryResponse, PeopleResponse, PersonSummary

router = APIRouter()


@router.get("/people", response_model=PeopleResponse)
def list_people() -> PeopleResponse:
    from .. import main as m

    with m.SessionLocal() as db:
        rows = m.repo.list_people(db)
    return PeopleResponse(people=[PersonSummary(**r) for r in rows])


@router.get("/people/{person_id}/matches", response_model=HistoryResponse)
def person_matches(person_id: int) -> HistoryResponse:
    from .. import main as m

    with m.SessionLocal() as db:
        try:
            rows = m.rounds.person_history(db, person_id)
        except UnknownPersonError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
    return HistoryResponse(person_id=person_id, history=[HistoryEntry(**r) for r in rows])
