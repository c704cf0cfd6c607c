"""
Read-only KPI queries over orders and leads.

Nothing is cached; every call hits the database again.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select

from ..data.database import Database
from ..data.models import Lead, Order, PaymentStatus, utcnow


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing ``now``."""
    monday = now - timedelta(days=now.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AnalyticsService:
    def __init__(self, db: Database, weeks: int = 8, max_workers: int = 5):
        self.db = db
        self.weeks = weeks
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="analytics")

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    # Each query opens its own session so they can run on separate threads.

    def _count_approved_orders(self, since: Optional[datetime] = None) -> int:
        query = select(func.count()).select_from(Order).where(
            Order.payment_status == PaymentStatus.approved.value
        )
        if since is not None:
            query = query.where(Order.created_at >= since)
        with self.db.session() as s:
            return s.scalar(query) or 0

    def _count_leads(self, since: Optional[datetime] = None) -> int:
        query = select(func.count()).select_from(Lead)
        if since is not None:
            query = query.where(Lead.created_at >= since)
        with self.db.session() as s:
            return s.scalar(query) or 0

    def _approved_revenue(self, since: datetime) -> Tuple[float, float]:
        query = select(func.sum(Order.total), func.avg(Order.total)).where(
            Order.payment_status == PaymentStatus.approved.value,
            Order.created_at >= since,
        )
        with self.db.session() as s:
            total, avg = s.execute(query).one()
        return total or 0, avg or 0

    def summary(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """KPI snapshot. The five reads are independent and not mutually consistent."""
        month = start_of_month(now or utcnow())

        futures = [
            self._executor.submit(self._count_approved_orders),
            self._executor.submit(self._count_approved_orders, month),
            self._executor.submit(self._count_leads),
            self._executor.submit(self._count_leads, month),
            self._executor.submit(self._approved_revenue, month),
        ]
        total_orders, month_orders, total_leads, month_leads, revenue = [f.result() for f in futures]
        month_revenue, avg_ticket = revenue

        return {
            "totalOrders": total_orders,
            "monthOrders": month_orders,
            "totalLeads": total_leads,
            "monthLeads": month_leads,
            "monthRevenue": month_revenue,
            "avgTicket": round_half_up(avg_ticket),
        }

    def revenue_weekly(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Approved revenue and order count per ISO week, oldest first, ending this week."""
        current = start_of_week(now or utcnow())
        starts = [current - timedelta(weeks=n) for n in range(self.weeks - 1, -1, -1)]

        query = select(Order.created_at, Order.total).where(
            Order.payment_status == PaymentStatus.approved.value,
            Order.created_at >= starts[0],
        )
        with self.db.session() as s:
            rows = s.execute(query).all()

        buckets = {start: {"revenue": 0, "orders": 0} for start in starts}
        for created_at, total in rows:
            bucket = buckets.get(start_of_week(created_at))
            if bucket is None:
                # created after ``now``
                continue
            bucket["revenue"] += total
            bucket["orders"] += 1

        return [
            {"period": start.strftime("%G-W%V"), "revenue": buckets[start]["revenue"], "orders": buckets[start]["orders"]}
            for start in starts
        ]
