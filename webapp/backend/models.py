"""SQLAlchemy models for the scrimmage DB."""
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, JSON, DateTime,
)
from sqlalchemy.orm import relationship

from database import Base


class Scrimmage(Base):
    __tablename__ = "scrimmages"
    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(String(64), nullable=False, index=True)  # owning club/team (external id)
    name = Column(String(100), nullable=True)
    rounds = Column(Integer, nullable=False)
    players_per_team = Column(Integer, nullable=False)
    timed_rounds = Column(Boolean, default=False)
    round_duration = Column(Integer, nullable=True)  # minutes, when timed
    settings = Column(JSON, default=dict)  # {"linked_groups": [[user_id, ...], ...]}
    created_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    participants = relationship(
        "ScrimmageParticipant", back_populates="scrimmage",
        cascade="all, delete-orphan", order_by="ScrimmageParticipant.id",
    )
    scrimmage_rounds = relationship(
        "ScrimmageRound", back_populates="scrimmage",
        cascade="all, delete-orphan", order_by="ScrimmageRound.round_number",
    )

    @property
    def linked_groups(self):
        return (self.settings or {}).get("linked_groups", [])


class ScrimmageParticipant(Base):
    __tablename__ = "scrimmage_participants"
    id = Column(Integer, primary_key=True, index=True)
    scrimmage_id = Column(Integer, ForeignKey("scrimmages.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False)
    user_name = Column(String(100), nullable=True)

    scrimmage = relationship("Scrimmage", back_populates="participants")


class ScrimmageRound(Base):
    """One generated round: matchups [{team1: [...], team2: [...]}], sitting_out [...]."""
    __tablename__ = "scrimmage_rounds"
    id = Column(Integer, primary_key=True, index=True)
    scrimmage_id = Column(Integer, ForeignKey("scrimmages.id", ondelete="CASCADE"), nullable=False)
    round_number = Column(Integer, nullable=False)
    matchups = Column(JSON, default=list)
    sitting_out = Column(JSON, default=list)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    scrimmage = relationship("Scrimmage", back_populates="scrimmage_rounds")
