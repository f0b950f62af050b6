"""Pydantic schemas for API."""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel


class ParticipantIn(BaseModel):
    user_id: str
    user_name: Optional[str] = None


class ParticipantOut(ParticipantIn):
    id: int

    class Config:
        from_attributes = True


class ScrimmageCreate(BaseModel):
    team_id: str
    name: Optional[str] = None
    rounds: int
    players_per_team: int
    timed_rounds: bool = False
    round_duration: Optional[int] = None
    created_by: Optional[str] = None
    participants: List[ParticipantIn]
    linked_groups: List[List[str]] = []


class MatchupOut(BaseModel):
    team1: List[str]
    team2: List[str]


class ScrimmageRoundOut(BaseModel):
    id: int
    round_number: int
    matchups: List[MatchupOut]
    sitting_out: List[str]

    class Config:
        from_attributes = True


class ScrimmageOut(BaseModel):
    id: int
    team_id: str
    name: Optional[str] = None
    rounds: int
    players_per_team: int
    timed_rounds: bool = False
    round_duration: Optional[int] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    linked_groups: List[List[str]] = []
    participants: List[ParticipantOut] = []
    scrimmage_rounds: List[ScrimmageRoundOut] = []

    class Config:
        from_attributes = True


class GenerateRoundsRequest(BaseModel):
    random_seed: Optional[int] = None
    composer: str = "sampling"  # sampling | cp-sat
    time_limit_seconds: float = 0  # 0 = unlimited; else seconds


class GenerateRoundsResponse(BaseModel):
    success: bool
    rounds: List[ScrimmageRoundOut] = []
    warnings: List[str] = []
    team_pairs: int = 0
    fallbacks: int = 0
