"""
Analytics API

- GET /analytics/overview?year=     dashboard totals and rates (ADMIN, DIRETOR)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional

from synexa.core.database import get_db
from synexa.models.user import User
from synexa.modules.auth.dependencies import require_roles, MANAGEMENT
from synexa.schemas.analytics import OverviewResponse
from synexa.services.analytics_service import analytics_service

router = APIRouter()


@router.get("/overview", response_model=OverviewResponse)
async def overview(
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Academic year, current one by default"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*MANAGEMENT)),
):
    return await analytics_service.overview(db, year or date.today().year)
