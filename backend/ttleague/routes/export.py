"""
Results export: completed matches as a downloadable CSV file.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session, select

from ttleague.database import get_session
from ttleague.models.match import STATUS_COMPLETED, Match
from ttleague.services.results_export import build_results_csv

router = APIRouter()


@router.get("/export/results.csv")
def export_results(session: Session = Depends(get_session)):
    """All completed matches in the order they were recorded."""
    matches = session.exec(
        select(Match)
        .where(Match.status == STATUS_COMPLETED)
        .order_by(Match.recorded_at, Match.id)
    ).all()

    filename = f"tournament-results-{datetime.utcnow().date().isoformat()}.csv"
    return Response(
        content=build_results_csv(matches),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
