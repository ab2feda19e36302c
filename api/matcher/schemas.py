from datetime import datetime
from pydantic import BaseModel, Field


class WaitingEntryResponse(BaseModel):
    person_id: int
    signup_time: datetime | None = None
    created: bool = False


class WithdrawResponse(BaseModel):
    person_id: int
    removed: bool


class WaitingListResponse(BaseModel):
    waiting: list[WaitingEntryResponse] = Field(default_factory=list)


class PersonSummary(BaseModel):
    id: int
    name: str
    email: str
    waiting: bool


class PeopleResponse(BaseModel):
    people: list[PersonSummary] = Field(default_factory=list)


class MatchRow(BaseModel):
    generation_id: int
    person1_id: int
    person1_name: str | None = None
    person2_id: int | None = None
    person2_name: str | None = None


class RoundView(BaseModel):
    generation_id: int | None = None
    created_at: datetime | None = None
    matches: list[MatchRow] = Field(default_factory=list)


class TriggerResponse(BaseModel):
    generation_id: int
    created_at: datetime
    pairs: list[tuple[int, int]]
    leftover: int | None = None
    total_weight: float


class HistoryEntry(BaseModel):
    generation_id: int
    created_at: datetime | None = None
    partner_id: int | None = None
    partner_name: str | None = None


class HistoryResponse(BaseModel):
    person_id: int
    history: list[HistoryEntry] = Field(default_factory=list)
