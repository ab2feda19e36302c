import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres:postgres@db:5432/matcher")


def make_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, future=True, connect_args={"check_same_thread": False})
    return create_engine(url, future=True)


def make_session_factory(bind):
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)
Base = declarative_base()
