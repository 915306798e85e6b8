# agricloud/deps.py
from fastapi import Depends

from .dashboard import FarmDashboard
from .oracle import AdvisoryOracle
from .stores import SqlFarmStore, SqlUserStore


def get_farm_store():
    return SqlFarmStore()


def get_user_store():
    return SqlUserStore()


def get_oracle():
    return AdvisoryOracle()


def get_dashboard(
    farms=Depends(get_farm_store),
    users=Depends(get_user_store),
    oracle=Depends(get_oracle),
):
    return FarmDashboard(farms, users, oracle)
