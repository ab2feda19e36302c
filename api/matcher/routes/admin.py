import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from ..auth.admin_deps import get_current_admin
from ..errors import EmptyPoolError, InfeasibleError, InsufficientParticipants, InternalError, TriggerAborted
from ..schemas import TriggerResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/admin/matches/trigger", response_model=TriggerResponse)
def trigger_matching(admin_user: dict[str, Any] = Depends(get_current_admin)) -> TriggerResponse:
    from .. import main as m

    logger.info("[ROUND] trigger requested by %s", admin_user.get("email"))
    try:
        result = m.round_controller.trigger()
    except InsufficientParticipants as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except TriggerAborted as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except (InternalError, EmptyPoolError, InfeasibleError):
        raise HTTPException(status_code=500, detail="Matching round failed; no changes were saved")

    return TriggerResponse(
        generation_id=result.generation_id,
        created_at=result.created_at,
        pairs=result.pairs,
        leftover=result.leftover,
        total_weight=result.total_weight,
    )
