"""
Reusable query builder functions to reduce code duplication across services.
"""
from typing import Optional, List, Tuple, TypeVar, TYPE_CHECKING
from datetime import date, datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, false
from sqlalchemy.orm import DeclarativeBase

from shiftboard.core.database import DeletionPolicy

if TYPE_CHECKING:
    from shiftboard.services.access_service import Principal

# Type variable for SQLAlchemy models
ModelType = TypeVar('ModelType', bound=DeclarativeBase)


async def get_paginated_results(
    db: AsyncSession,
    query,
    skip: int = 0,
    limit: int = 100,
    order_by=None,
) -> Tuple[List, int]:
    """
    Execute a paginated query and return results with total count.

    Args:
        db: Database session
        query: SQLAlchemy select query
        skip: Number of records to skip
        limit: Maximum number of records to return
        order_by: Column(s) to order by (optional)

    Returns:
        Tuple of (results_list, total_count)
    """
    count_query = select(func.count()).select_from(query.subquery())
    count_result = await db.execute(count_query)
    total = count_result.scalar() or 0

    if order_by is not None:
        if isinstance(order_by, (list, tuple)):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    result = await db.execute(query.offset(skip).limit(limit))
    items = result.scalars().all()

    return list(items), total


def apply_location_scope(query, location_column, principal: "Principal"):
    """
    AND the principal's access scope into a query on ``location_column``.

    Principals that see everything are still held to their own company.
    """
    from shiftboard.models.location import Location
    from shiftboard.services.access_service import resolve_scope

    scope = resolve_scope(principal)
    if scope.sees_all:
        company_locations = select(Location.id).where(Location.company_id == principal.company_id)
        return query.where(location_column.in_(company_locations))
    if not scope.location_ids:
        return query.where(false())
    return query.where(location_column.in_(list(scope.location_ids)))


def filter_by_status(
    query,
    model: type[ModelType],
    status,
    status_column_name: str = "status",
):
    """Add status filter to a query."""
    status_column = getattr(model, status_column_name)
    return query.where(status_column == status)


def filter_by_date_range(
    query,
    model: type[ModelType],
    date_column_name: str,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
):
    """
    Add an inclusive date range filter to a query.

    DATE columns compare calendar days directly; datetime columns get the
    whole of each boundary day.
    """
    date_column = getattr(model, date_column_name)
    is_datetime = date_column.type.python_type is datetime

    if from_date:
        if is_datetime:
            query = query.where(date_column >= datetime.combine(from_date, datetime.min.time()))
        else:
            query = query.where(date_column >= from_date)

    if to_date:
        if is_datetime:
            query = query.where(date_column <= datetime.combine(to_date, datetime.max.time()))
        else:
            query = query.where(date_column <= to_date)

    return query


async def delete_record(db: AsyncSession, record) -> None:
    """
    Remove a record according to its model's declared deletion policy.

    SOFT records are deactivated (``is_active = False``); HARD records are
    deleted. The caller commits.
    """
    policy = getattr(type(record), "deletion_policy", DeletionPolicy.HARD)
    if policy == DeletionPolicy.SOFT:
        record.is_active = False
    else:
        await db.delete(record)
    await db.flush()
