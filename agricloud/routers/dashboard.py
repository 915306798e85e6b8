# agricloud/routers/dashboard.py
from fastapi import APIRouter, Depends

from ..deps import get_dashboard
from ..schemas import DashboardView, FarmSnapshot

router = APIRouter(prefix="/api/farms", tags=["Dashboard"])


@router.get("/{farm_id}/dashboard", response_model=DashboardView)
async def farm_dashboard(farm_id: str, dashboard=Depends(get_dashboard)):
    return await dashboard.load(farm_id)


@router.get("/{farm_id}/snapshot", response_model=FarmSnapshot)
async def farm_snapshot(farm_id: str, dashboard=Depends(get_dashboard)):
    return await dashboard.snapshot(farm_id)
