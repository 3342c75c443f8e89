from dataclasses import asdict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db import get_db
from app.schemas.personal_record import ClubProgressRead, ExercisePRRead, RecomputeRead
from app.repositories.pr_repo import PRRepository
from app.services.prs import ClubProgress
from app.services.recompute import PRService
from app.deps.auth import get_current_user_id
from app.deps.timezone import get_viewer_timezone

router = APIRouter(prefix="/prs", tags=["prs"])

def _club_read(club: ClubProgress, target_kg: float) -> ClubProgressRead:
    return ClubProgressRead(**asdict(club), target_kg=target_kg)

@router.get("", response_model=list[ExercisePRRead])
def list_prs(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return PRRepository(db).read_summaries(user_id)

@router.get("/club", response_model=ClubProgressRead)
def club_progress(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    service = PRService(db, user_id)
    return _club_read(service.club(), service.target_kg)

@router.post("/recompute", response_model=RecomputeRead)
def recompute_prs(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tz=Depends(get_viewer_timezone),
):
    service = PRService(db, user_id, tz)
    result = service.recompute()
    return RecomputeRead(
        summaries=[ExercisePRRead.model_validate(s) for s in result.summaries],
        improved={ex_id: sorted(m.value for m in metrics) for ex_id, metrics in result.improved.items()},
        club_before=_club_read(result.club_before, service.target_kg),
        club_after=_club_read(result.club_after, service.target_kg),
        club_just_reached=result.club_just_reached,
        discarded=result.discarded,
    )
