"""
Analytics Service.

Read-only aggregations over trips for dashboards.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case

from dispatch.app.models.trip import Trip
from dispatch.app.models.trip_enums import TripStatus
from dispatch.app.domain.dispatch.trip_lifecycle import ACTIVE_STATUSES
from dispatch.app.schemas.analytics import TripStatistics, DriverStatistics
from dispatch.app.services.resource_service import get_driver


class AnalyticsService:

    @staticmethod
    async def get_trip_statistics(db: AsyncSession) -> TripStatistics:
        """Count trips per status; statuses with no trips report 0."""
        rows = await db.execute(
            select(Trip.status, func.count(Trip.trip_id)).group_by(Trip.status)
        )
        by_status = {status.value: 0 for status in TripStatus}
        for status, count in rows:
            by_status[status.value] = count

        return TripStatistics(total_trips=sum(by_status.values()), by_status=by_status)

    @staticmethod
    async def get_driver_statistics(db: AsyncSession, driver_id: int) -> DriverStatistics:
        """
        Aggregate a driver's trips.

        Earnings count completed trips only, preferring the recorded actual
        cost over the estimate.
        """
        await get_driver(db, driver_id)

        completed = Trip.status == TripStatus.COMPLETED
        stmt = select(
            func.count(Trip.trip_id).label("total"),
            func.coalesce(func.sum(case((completed, 1), else_=0)), 0).label("completed"),
            func.coalesce(func.sum(case((Trip.status.in_(list(ACTIVE_STATUSES)), 1), else_=0)), 0).label("active"),
            func.coalesce(func.sum(case((Trip.status == TripStatus.CANCELLED, 1), else_=0)), 0).label("cancelled"),
            func.coalesce(
                func.sum(case((completed, func.coalesce(Trip.actual_cost, Trip.estimated_cost, 0)), else_=0)), 0
            ).label("earnings"),
            func.avg(case((completed, Trip.customer_rating), else_=None)).label("average_rating"),
        ).where(Trip.assigned_driver_id == driver_id)

        row = (await db.execute(stmt)).one()

        return DriverStatistics(
            driver_id=driver_id,
            total_trips=row.total,
            completed_trips=row.completed,
            active_trips=row.active,
            cancelled_trips=row.cancelled,
            total_earnings=round(float(row.earnings), 2),
            average_rating=round(float(row.average_rating), 2) if row.average_rating is not None else None
        )
