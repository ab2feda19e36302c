import logging
import time

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from . import models  # noqa: F401  registers tables on Base.metadata
from . import repo
from .config import LOG_LEVEL, SIGNUP_IDEMPOTENT
from .database import Base, SessionLocal, engine
from .routes import include_modular_routers
from .services import rounds, waiting
from .services.rounds import RoundController

logger = logging.getLogger(__name__)

app = FastAPI(title="Matcher API")
include_modular_routers(app)

round_controller = RoundController(SessionLocal)

__all__ = ["app", "repo", "rounds", "waiting", "round_controller", "SessionLocal", "SIGNUP_IDEMPOTENT"]


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def init_db(bind=None) -> None:
    Base.metadata.create_all(bind=bind or engine)


def wait_for_db(max_attempts: int = 20, delay_seconds: float = 1.5) -> None:
    last_err: Exception | None = None
    for _ in range(max_attempts):
        try:
            with SessionLocal() as db:
                db.execute(text("SELECT 1"))
                db.commit()
            return
        except OperationalError as exc:
            last_err = exc
            logger.warning("[DB] not ready yet: %s", exc)
            time.sleep(delay_seconds)
    if last_err:
        raise last_err


@app.on_event("startup")
def on_startup() -> None:
    configure_logging()
    wait_for_db()
    init_db()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
