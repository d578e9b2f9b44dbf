"""
Read-only access to pending reserve orders stored in Supabase.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from supabase import Client as SupabaseClientType
from supabase import create_client

from voucher_core.models import PENDING_RESERVATION_STATUS, OrderSummary

LOGGER = logging.getLogger(__name__)

ORDER_COLUMNS = "id, status, type, applicant_name, phone, expected_date"


class OrderStoreError(RuntimeError):
    """Raised when the order store cannot be queried."""


class SupabaseOrderStore:
    """Thin wrapper around the Supabase ``orders`` table."""

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "orders",
        client: Optional[Any] = None,
    ):
        self.table = table
        if client is None:
            try:
                client = create_client(url, key)
            except Exception as exc:
                raise OrderStoreError(f"Failed to create Supabase client: {exc}") from exc
        self.client: SupabaseClientType = client

    def fetch_pending_orders(
        self,
        status: str = PENDING_RESERVATION_STATUS,
        order_type: Optional[str] = "reserve",
    ) -> List[OrderSummary]:
        """Return every order waiting on its reservation schedule."""
        try:
            query = self.client.table(self.table).select(ORDER_COLUMNS).eq("status", status)
            if order_type:
                query = query.eq("type", order_type)
            response = query.execute()
        except Exception as exc:
            raise OrderStoreError(f"Failed to query {self.table}: {exc}") from exc

        rows = response.data or []
        LOGGER.info("Found %s orders with status %s", len(rows), status)
        return [OrderSummary.from_row(row) for row in rows]
