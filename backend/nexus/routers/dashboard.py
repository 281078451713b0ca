from fastapi import APIRouter, Depends

from ..dependencies import get_dashboard_service
from ..schemas.dashboard import DashboardStats
from ..services.admin import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardStats:
    return await service.get_stats()
