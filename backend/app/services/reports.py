"""
Financial and inventory reporting.

Aggregations and the financial CSV go through pandas DataFrames.
"""

import logging
from datetime import datetime, time
from typing import List, Optional, Tuple

import pandas as pd
from sqlalchemy.orm import Session, joinedload

from app.models import Product, Transaction
from app.schemas import (
    ChartPoint, FinancialReport, FinancialsResponse, InventoryReportRow,
    ReportTransaction, TransactionSchema
)
from app.services.exceptions import InvalidStateError

logger = logging.getLogger(__name__)

INVENTORY_CSV_COLUMNS = ["id", "name", "category", "price", "stockQuantity", "inStock"]


def csv_cell(value) -> str:
    """Strings quoted; whole numbers without a decimal point; lowercase booleans."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_report_date(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """Parse YYYY-MM-DD; the end bound covers the whole day."""
    if not value:
        return None
    try:
        day = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidStateError(f"Invalid date '{value}'. Use YYYY-MM-DD")
    return datetime.combine(day, time.max if end_of_day else time.min)


def transactions_frame(transactions: List[Transaction]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "date": t.transaction_date,
                "mpesa_receipt": t.mpesa_receipt,
                "order_id": t.order_id,
                "amount": float(t.amount),
            }
            for t in transactions
        ],
        columns=["date", "mpesa_receipt", "order_id", "amount"]
    )


def daily_revenue(df: pd.DataFrame) -> List[ChartPoint]:
    """Revenue summed per calendar day, in date order."""
    if df.empty:
        return []
    days = pd.to_datetime(df["date"]).dt.strftime("%Y-%m-%d")
    grouped = df.groupby(days, sort=True)["amount"].sum()
    return [ChartPoint(date=day, revenue=float(total)) for day, total in grouped.items()]


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    def _transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[Transaction]:
        query = self.db.query(Transaction)
        if start:
            query = query.filter(Transaction.transaction_date >= start)
        if end:
            query = query.filter(Transaction.transaction_date <= end)
        return query.order_by(Transaction.transaction_date.asc()).all()

    def get_financials(self) -> FinancialsResponse:
        transactions = self._transactions()
        df = transactions_frame(transactions)
        return FinancialsResponse(
            transactions=[TransactionSchema.model_validate(t) for t in transactions],
            total_revenue=float(df["amount"].sum()) if not df.empty else 0.0,
            chart_data=daily_revenue(df)
        )

    # ----- Financial report -----

    def financial_report(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> FinancialReport:
        start = parse_report_date(start_date)
        end = parse_report_date(end_date, end_of_day=True)
        if start and end and start > end:
            raise InvalidStateError("startDate must not be after endDate")

        df = transactions_frame(self._transactions(start, end))
        rows = [
            ReportTransaction(
                date=pd.Timestamp(r.date).strftime("%Y-%m-%d"),
                mpesa_receipt=r.mpesa_receipt,
                order_id=int(r.order_id),
                amount=float(r.amount)
            )
            for r in df.itertuples(index=False)
        ]
        return FinancialReport(
            period=f"{start_date or 'beginning'} to {end_date or 'now'}",
            total_revenue=float(df["amount"].sum()) if not df.empty else 0.0,
            transactions=rows
        )

    @staticmethod
    def financial_report_csv(report: FinancialReport) -> str:
        header = f"Period,Total Revenue\n{report.period},{report.total_revenue:.2f}\n\n"
        df = pd.DataFrame(
            [[t.date, t.mpesa_receipt, t.order_id, t.amount] for t in report.transactions],
            columns=["Date", "Mpesa Receipt", "Order ID", "Amount"]
        )
        body = df.to_csv(index=False, float_format="%.2f", lineterminator="\n")
        return header + body

    # ----- Inventory report -----

    def inventory_report(self) -> List[InventoryReportRow]:
        products = (
            self.db.query(Product)
            .options(joinedload(Product.category))
            .order_by(Product.name.asc())
            .all()
        )
        return [
            InventoryReportRow(
                id=p.id,
                name=p.name,
                category=p.category.name if p.category else "",
                price=p.price,
                stock_quantity=p.stock_quantity,
                in_stock=p.in_stock
            )
            for p in products
        ]

    @staticmethod
    def inventory_report_csv(rows: List[InventoryReportRow]) -> str:
        if not rows:
            return "No data available"

        lines = [",".join(INVENTORY_CSV_COLUMNS)]
        for row in rows:
            record = row.model_dump(by_alias=True)
            lines.append(",".join(csv_cell(record[column]) for column in INVENTORY_CSV_COLUMNS))
        return "\n".join(lines)

    @staticmethod
    def csv_filename(kind: str) -> Tuple[str, str]:
        stamp = int(datetime.utcnow().timestamp() * 1000)
        return f"{kind}_report_{stamp}.csv", "text/csv"
