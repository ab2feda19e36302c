from fastapi import APIRouter, HTTPException

from ..errors import DuplicateError, UnknownPersonError
from ..schemas import WaitingEntryResponse, WaitingListResponse, WithdrawResponse

router = APIRouter()


@router.post("/waiting/{person_id}", response_model=WaitingEntryResponse)
def sign_up(person_id: int) -> WaitingEntryResponse:
    from .. import main as m

    with m.SessionLocal() as db:
        try:
            entry = m.waiting.signup(db, person_id, idempotent=m.SIGNUP_IDEMPOTENT)
        except UnknownPersonError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except DuplicateError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        db.commit()
    return WaitingEntryResponse(**entry)


@router.delete("/waiting/{person_id}", response_model=WithdrawResponse)
def withdraw(person_id: int) -> WithdrawResponse:
    from .. import main as m

    with m.SessionLocal() as db:
        try:
            removed = m.waiting.withdraw(db, person_id)
        except UnknownPersonError as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        db.commit()
    return WithdrawResponse(person_id=person_id, removed=removed)


@router.get("/waiting", response_model=WaitingListResponse)
def list_waiting() -> WaitingListResponse:
    from .. import main as m

    with m.SessionLocal() as db:
        rows = m.waiting.list_waiting(db)
    return WaitingListResponse(waiting=[WaitingEntryResponse(**r) for r in rows])
