from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, func
from .database import Base


class Person(Base):
    __tablename__ = "person"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class WaitingEntry(Base):
    __tablename__ = "waiting_entry"

    person_id = Column(Integer, ForeignKey("person.id", ondelete="CASCADE"), primary_key=True)
    signup_time = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("idx_waiting_entry_signup_time", "signup_time"),)


class Generation(Base):
    __tablename__ = "generation"

    id = Column(Integer, primary_key=True, autoincrement=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Match(Base):
    __tablename__ = "round_match"

    id = Column(Integer, primary_key=True)
    generation_id = Column(Integer, ForeignKey("generation.id"), nullable=False)
    person1_id = Column(Integer, ForeignKey("person.id"), nullable=False)
    person2_id = Column(Integer, ForeignKey("person.id"), nullable=True)

    __table_args__ = (
        Index("idx_round_match_generation_id", "generation_id"),
        Index("idx_round_match_person1_id", "person1_id"),
        Index("idx_round_match_person2_id", "person2_id"),
    )


class Edge(Base):
    __tablename__ = "edge"

    person_a_id = Column(Integer, ForeignKey("person.id"), primary_key=True)
    person_b_id = Column(Integer, ForeignKey("person.id"), primary_key=True)
    weight = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("person_a_id < person_b_id", name="ck_edge_canonical_pair"),
        CheckConstraint("weight >= 0", name="ck_edge_weight_non_negative"),
    )
