# agricloud/routers/advisory.py
from fastapi import APIRouter, Depends

from ..deps import get_dashboard
from ..schemas import AdvisoryPlan

router = APIRouter(prefix="/api/farms", tags=["Advisory"])


@router.post("/{farm_id}/advisory", response_model=AdvisoryPlan)
async def predict(farm_id: str, dashboard=Depends(get_dashboard)):
    return await dashboard.predict(farm_id)
