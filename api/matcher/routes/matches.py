from fastapi import APIRouter, HTTPException

from ..schemas import MatchRow, RoundView

router = APIRouter()


def _round_view(generation_id: int | None) -> RoundView | None:
    from .. import main as m

    with m.SessionLocal() as db:
        out = m.rounds.view_round(db, generation_id)
    if out is None:
        return None
    return RoundView(
        generation_id=out["generation_id"],
        created_at=out["created_at"],
        matches=[MatchRow(**r) for r in out["matches"]],
    )


@router.get("/matches", response_model=RoundView)
def latest_matches() -> RoundView:
    return _round_view(None) or RoundView()


@router.get("/matches/{generation_id}", response_model=RoundView)
def matches_for_generation(generation_id: int) -> RoundView:
    view = _round_view(generation_id)
    if view is None:
        raise HTTPException(status_code=404, detail="Generation not found")
    return view
