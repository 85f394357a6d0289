# backend/trackcoach/routers/dashboard.py

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from trackcoach import models, schemas
from trackcoach.db import get_db
from trackcoach.permissions import Permission, require_permission
from trackcoach.services.dashboard import dashboard_stats

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=schemas.DashboardStatsOut)
def read_dashboard_stats(
    current_user: models.AppUser = Depends(require_permission(Permission.VIEW_DASHBOARD)),
    db: Session = Depends(get_db)
):
    return dashboard_stats(db, current_user, date.today()).as_dict()
