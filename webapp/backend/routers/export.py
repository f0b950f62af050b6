"""Export generated scrimmage rounds to Excel."""
import io
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from database import get_db
from models import Scrimmage
from scheduler.models import Matchup, Round
from scheduler.write_schedule import build_workbook
from routers.scrimmages import config_for

router = APIRouter()


@router.get("/excel")
def export_excel(scrimmage_id: int, db: Session = Depends(get_db)):
    """Workbook with ROUNDS (one row per matchup) and SITTING (sit-out grid)."""
    s = db.query(Scrimmage).filter(Scrimmage.id == scrimmage_id).first()
    if not s:
        raise HTTPException(404, "Scrimmage not found")
    if not s.scrimmage_rounds:
        raise HTTPException(400, "No rounds generated yet")

    rounds = [
        Round(
            round_number=r.round_number,
            matchups=[Matchup(team1=m["team1"], team2=m["team2"]) for m in r.matchups or []],
            sitting_out=list(r.sitting_out or []),
        )
        for r in s.scrimmage_rounds
    ]
    names = {p.user_id: p.user_name for p in s.participants if p.user_name}
    wb = build_workbook(rounds, config_for(s), names=names)

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    filename = f"scrimmage_{s.id}_rounds.xlsx"
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
