# agricloud/routers/farms.py
import datetime
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..deps import get_farm_store
from ..schemas import CamelModel, Farm, Location

router = APIRouter(prefix="/api/farms", tags=["Farms"])


class FarmIn(CamelModel):
    user_id: str
    name: Optional[str] = None
    crop: str
    location: Location
    size: float = 0.0
    planting_date: Optional[datetime.date] = None


@router.get("", response_model=List[Farm])
def list_farms(user_id: str = Query(..., alias="userId"), farms=Depends(get_farm_store)):
    return farms.list_for_user(user_id)


@router.post("", response_model=Farm, status_code=201)
def create_farm(payload: FarmIn, farms=Depends(get_farm_store)):
    farm_id = str(uuid.uuid4())
    farm = Farm(
        id=farm_id,
        user_id=payload.user_id,
        name=payload.name or "Farm-" + farm_id[:6],
        crop=payload.crop,
        location=payload.location,
        size=payload.size,
        planting_date=payload.planting_date,
    )
    return farms.create(farm)


@router.get("/{farm_id}", response_model=Farm)
def get_farm(farm_id: str, farms=Depends(get_farm_store)):
    farm = farms.get(farm_id)
    if not farm:
        raise HTTPException(status_code=404, detail="Farm not found")
    return farm


@router.delete("/{farm_id}", status_code=204)
def delete_farm(farm_id: str, farms=Depends(get_farm_store)):
    if not farms.get(farm_id):
        raise HTTPException(status_code=404, detail="Farm not found")
    farms.delete(farm_id)
    return Response(status_code=204)
