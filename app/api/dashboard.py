from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.dashboard import DashboardResponse, UserStats
from app.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get(
    "/",
    response_model=DashboardResponse,
    summary="Dashboard overview",
    description="""
    Store overview for admins:

    - user, active product and order counts, revenue from delivered orders
    - the 10 most recent orders and the 10 lowest-stock products
    - monthly delivered sales, oldest month first
    """
)
def dashboard_overview(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return DashboardService(db).overview()


@router.get("/user-stats", response_model=UserStats, summary="User statistics")
def dashboard_user_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return DashboardService(db).user_stats()
