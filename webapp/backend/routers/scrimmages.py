from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from models import Scrimmage, ScrimmageParticipant, ScrimmageRound
from schemas import (
    ScrimmageCreate, ScrimmageOut, ScrimmageRoundOut,
    GenerateRoundsRequest, GenerateRoundsResponse,
)
from scheduler.composer import get_composer
from scheduler.generator import generate_schedule, ScheduleCancelled
from scheduler.models import Round, ScrimmageConfig, SearchStats
from scheduler.validate import ConfigurationError, config_problems, consecutive_sits

router = APIRouter()


def config_for(s: Scrimmage, random_seed: Optional[int] = None) -> ScrimmageConfig:
    return ScrimmageConfig(
        participants=[p.user_id for p in s.participants],
        total_rounds=s.rounds,
        players_per_team=s.players_per_team,
        linked_groups=[list(g) for g in s.linked_groups],
        random_seed=random_seed,
    )


def get_scrimmage_or_404(scrimmage_id: int, db: Session) -> Scrimmage:
    s = db.query(Scrimmage).filter(Scrimmage.id == scrimmage_id).first()
    if not s:
        raise HTTPException(404, "Scrimmage not found")
    return s


def replace_rounds(db: Session, scrimmage_id: int, rounds: List[Round]) -> List[ScrimmageRound]:
    """Delete previously generated rounds and store one row per new round."""
    db.query(ScrimmageRound).filter(ScrimmageRound.scrimmage_id == scrimmage_id).delete()
    rows = []
    for rnd in rounds:
        row = ScrimmageRound(
            scrimmage_id=scrimmage_id,
            round_number=rnd.round_number,
            matchups=[m.to_dict() for m in rnd.matchups],
            sitting_out=list(rnd.sitting_out),
        )
        db.add(row)
        rows.append(row)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


@router.get("/", response_model=list[ScrimmageOut])
def list_scrimmages(team_id: str = None, db: Session = Depends(get_db)):
    q = db.query(Scrimmage)
    if team_id:
        q = q.filter(Scrimmage.team_id == team_id)
    return [ScrimmageOut.model_validate(s) for s in q.order_by(Scrimmage.created_at.desc()).all()]


@router.post("/", response_model=ScrimmageOut, status_code=201)
def create_scrimmage(data: ScrimmageCreate, db: Session = Depends(get_db)):
    config = ScrimmageConfig(
        participants=[p.user_id for p in data.participants],
        total_rounds=data.rounds,
        players_per_team=data.players_per_team,
        linked_groups=data.linked_groups,
    )
    problems = config_problems(config)
    if problems:
        raise HTTPException(400, {"message": "Invalid scrimmage configuration", "problems": problems})

    s = Scrimmage(
        team_id=data.team_id,
        name=data.name,
        rounds=data.rounds,
        players_per_team=data.players_per_team,
        timed_rounds=data.timed_rounds,
        round_duration=data.round_duration,
        created_by=data.created_by,
        settings={"linked_groups": data.linked_groups} if data.linked_groups else {},
    )
    for p in data.participants:
        s.participants.append(ScrimmageParticipant(user_id=p.user_id, user_name=p.user_name))
    db.add(s)
    db.commit()
    db.refresh(s)
    return ScrimmageOut.model_validate(s)


@router.get("/{scrimmage_id}", response_model=ScrimmageOut)
def get_scrimmage(scrimmage_id: int, db: Session = Depends(get_db)):
    return ScrimmageOut.model_validate(get_scrimmage_or_404(scrimmage_id, db))


@router.delete("/{scrimmage_id}")
def delete_scrimmage(scrimmage_id: int, db: Session = Depends(get_db)):
    """Delete a scrimmage with its participants and generated rounds."""
    s = get_scrimmage_or_404(scrimmage_id, db)
    db.delete(s)
    db.commit()
    return {"ok": True, "deleted": scrimmage_id}


@router.get("/{scrimmage_id}/rounds", response_model=list[ScrimmageRoundOut])
def list_rounds(scrimmage_id: int, db: Session = Depends(get_db)):
    get_scrimmage_or_404(scrimmage_id, db)
    rows = (
        db.query(ScrimmageRound)
        .filter(ScrimmageRound.scrimmage_id == scrimmage_id)
        .order_by(ScrimmageRound.round_number)
        .all()
    )
    return [ScrimmageRoundOut.model_validate(r) for r in rows]


@router.post("/{scrimmage_id}/generate", response_model=GenerateRoundsResponse)
def generate_rounds(scrimmage_id: int, data: GenerateRoundsRequest = None,
                    db: Session = Depends(get_db)):
    """Regenerate every round for the scrimmage, replacing stored rounds."""
    data = data or GenerateRoundsRequest()
    s = get_scrimmage_or_404(scrimmage_id, db)
    try:
        composer = get_composer(data.composer)
    except ValueError as e:
        raise HTTPException(400, str(e))

    stats = SearchStats()
    try:
        rounds = generate_schedule(
            config_for(s, data.random_seed),
            composer=composer,
            stats=stats,
            time_limit_seconds=data.time_limit_seconds or None,
        )
    except ConfigurationError as e:
        raise HTTPException(400, {"message": "Invalid scrimmage configuration", "problems": e.problems})
    except ScheduleCancelled as e:
        raise HTTPException(504, str(e))

    rows = replace_rounds(db, s.id, rounds)
    warnings = consecutive_sits(rounds)
    if stats.under_resourced_rounds:
        warnings.append(f"{stats.under_resourced_rounds} round(s) had too few players for a match")
    return GenerateRoundsResponse(
        success=True,
        rounds=[ScrimmageRoundOut.model_validate(r) for r in rows],
        warnings=warnings,
        team_pairs=stats.team_pairs,
        fallbacks=stats.fallbacks,
    )
