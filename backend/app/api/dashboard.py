from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.deps import get_admin_user, get_current_user, http_error
from app.models import get_db, User
from app.schemas import (
    DashboardStats, PreferenceResponse, PreferenceUpdate,
    NotificationResponse, NotificationReadRequest,
    FinancialsResponse, FinancialReport, InventoryReportRow
)
from app.services import DashboardService, ReportService, ServiceError

router = APIRouter()


def csv_response(content: str, kind: str) -> Response:
    filename, media_type = ReportService.csv_filename(kind)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


# ============== Dashboard ==============

@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Headline figures; order and customer counts cover the last 30 days."""
    return DashboardService(db).get_stats()


@router.get("/dashboard/preferences", response_model=PreferenceResponse)
def get_dashboard_preferences(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DashboardService(db).get_preferences(user)


@router.put("/dashboard/preferences", response_model=PreferenceResponse)
def update_dashboard_preferences(
    update: PreferenceUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return DashboardService(db).update_preferences(user, update.dashboard_layout)


# ============== Notifications ==============

@router.get("/notifications", response_model=List[NotificationResponse])
def list_notifications(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The caller's notifications, newest first."""
    return DashboardService(db).list_notifications(user)


@router.post("/notifications", response_model=NotificationResponse)
def mark_notification_read(
    request: NotificationReadRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return DashboardService(db).mark_read(user, request.notification_id)
    except ServiceError as e:
        raise http_error(e)


# ============== Financials & Reports ==============

@router.get("/financials", response_model=FinancialsResponse)
def get_financials(
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """All M-Pesa transactions with total revenue and a daily revenue series."""
    return ReportService(db).get_financials()


@router.get("/reports/financials", response_model=FinancialReport)
def financial_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    format: str = Query(default="json", pattern="^(json|csv)$"),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """
    Revenue for a date range (YYYY-MM-DD, both ends inclusive).

    format=csv downloads a header block followed by one row per transaction.
    """
    service = ReportService(db)
    try:
        report = service.financial_report(start_date, end_date)
    except ServiceError as e:
        raise http_error(e)

    if format == "csv":
        return csv_response(service.financial_report_csv(report), "financial")
    return report


@router.get("/reports/inventory", response_model=List[InventoryReportRow])
def inventory_report(
    format: str = Query(default="json", pattern="^(json|csv)$"),
    admin: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    service = ReportService(db)
    rows = service.inventory_report()
    if format == "csv":
        return csv_response(service.inventory_report_csv(rows), "inventory")
    return rows
