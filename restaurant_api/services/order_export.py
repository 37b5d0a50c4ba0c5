"""
Order Excel Export

Builds an .xlsx workbook of all orders for the admin dashboard's
"download" button. The workbook is produced in memory per request, one row
per order with its lines flattened to text.

Author: Khalil_Bannouri
Version: 1.0.0
"""

import io
import logging
from datetime import datetime
from typing import Any, Iterable

import pandas as pd

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class OrderExporter:
    """Excel rendering of the admin order listing."""

    ORDER_COLUMNS = [
        "order_id",
        "date_time",
        "customer_username",
        "customer_email",
        "customer_phone",
        "items",
        "item_count",
        "total_amount",
        "order_status",
        "exported_at",
    ]

    SHEET_NAME = "orders"

    @staticmethod
    def _format_items(items: Iterable[dict[str, Any]]) -> str:
        return "; ".join(
            f"{line['quantity']} x {line.get('name') or '(removed item)'} @ {line['price']}"
            for line in items
        )

    @staticmethod
    def _isoformat(value: Any) -> Any:
        # Excel has no timezone-aware datetimes
        return value.isoformat() if isinstance(value, datetime) else value

    @classmethod
    def to_rows(cls, orders: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        """Flatten admin order views into spreadsheet rows."""
        export_time = datetime.now().isoformat()
        return [
            {
                "order_id": order["id"],
                "date_time": cls._isoformat(order.get("created_at")),
                "customer_username": order.get("username"),
                "customer_email": order.get("email"),
                "customer_phone": order.get("phone"),
                "items": cls._format_items(order.get("items", [])),
                "item_count": sum(line["quantity"] for line in order.get("items", [])),
                "total_amount": float(order["total_amount"]),
                "order_status": order["status"],
                "exported_at": export_time,
            }
            for order in orders
        ]

    @classmethod
    def to_xlsx(cls, orders: Iterable[dict[str, Any]]) -> bytes:
        """
        Render orders as an .xlsx document.

        Returns:
            bytes: Workbook contents
        """
        rows = cls.to_rows(orders)
        df = pd.DataFrame(rows, columns=cls.ORDER_COLUMNS)

        buffer = io.BytesIO()
        df.to_excel(buffer, index=False, sheet_name=cls.SHEET_NAME, engine="openpyxl")

        logger.info(f"Exported {len(df)} orders to Excel")
        return buffer.getvalue()

    @staticmethod
    def filename() -> str:
        return f"orders-{datetime.now().strftime('%Y%m%d-%H%M%S')}.xlsx"
