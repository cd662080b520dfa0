"""
Catalog Gateway - Read access to the SamanaInn catalog.

Responders only ever see the abstract CatalogGateway: six async lookups that
return plain dicts (catalog records). SQLCatalogGateway is the production
implementation over the PostgreSQL catalog tables.

Filter contract (all keys optional, AND semantics, unknown keys ignored):
    location            Location name or record tags, case-insensitive substring
    category            Category name (restaurants, tours) or vehicle type (cars)
    accommodation_type  Exact lodging subtype (hotel, apartment, villa)
    min_price/max_price Compared against price or sale_price
    rating              Floor on star rate (lodging) or review score (others)
    min_duration/max_duration  Tour duration in hours
    has_pool            Record tagged "pool"
    group_type          Record tagged with the group type (family, couple...)
    is_featured         Featured flag
    limit               Maximum rows (absent = unbounded)

Results are ordered featured first, then newest (id DESC), and only
published rows are returned.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from database.connection import get_async_session
from database.models import (
    Car,
    Hotel,
    Location,
    NewsArticle,
    PublishStatus,
    Restaurant,
    RestaurantCategory,
    Tour,
    TourCategory,
)

logger = logging.getLogger(__name__)

CatalogRecord = dict[str, Any]

ARTICLE_SEARCH_LIMIT = 10


class CatalogLookupError(Exception):
    """Raised when a catalog query cannot be executed."""


# ============================================================================
# Interface
# ============================================================================


class CatalogGateway(ABC):
    """Catalog lookups used by the topic responders."""

    @abstractmethod
    async def query_lodging(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        ...

    @abstractmethod
    async def query_restaurants(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        ...

    @abstractmethod
    async def query_tours(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        ...

    @abstractmethod
    async def query_vehicles(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        ...

    @abstractmethod
    async def query_location_info(self, name: str) -> list[CatalogRecord]:
        """Locations whose name contains `name` (newest first, at most one)."""

    @abstractmethod
    async def search_articles(self, keyword: str) -> list[CatalogRecord]:
        """Blog articles mentioning `keyword` (newest first, at most ten)."""


# ============================================================================
# SQL implementation
# ============================================================================


def _as_float(value: Decimal | float | int | None) -> float | None:
    return float(value) if value is not None else None


def _tags_text(model: Any):
    return func.array_to_string(model.tags, ",")


class SQLCatalogGateway(CatalogGateway):
    """
    CatalogGateway over the SQLAlchemy catalog models.

    Statement builders are public so the generated SQL can be inspected
    without a database.
    """

    def __init__(self, session_factory: Callable = get_async_session):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Statement builders
    # ------------------------------------------------------------------

    def _apply_common_filters(
        self,
        stmt: Select,
        model: Any,
        filters: dict[str, Any],
        rating_column: Any,
    ) -> Select:
        stmt = stmt.where(model.status == PublishStatus.PUBLISH.value)

        location = filters.get("location")
        if location:
            pattern = f"%{location}%"
            stmt = stmt.where(
                or_(Location.name.ilike(pattern), _tags_text(model).ilike(pattern))
            )

        min_price = filters.get("min_price")
        if min_price is not None:
            stmt = stmt.where(or_(model.price >= min_price, model.sale_price >= min_price))

        max_price = filters.get("max_price")
        if max_price is not None:
            stmt = stmt.where(or_(model.price <= max_price, model.sale_price <= max_price))

        rating = filters.get("rating")
        if rating is not None:
            stmt = stmt.where(rating_column >= rating)

        if filters.get("has_pool"):
            stmt = stmt.where(model.tags.any("pool"))

        group_type = filters.get("group_type")
        if group_type:
            stmt = stmt.where(model.tags.any(group_type))

        if filters.get("is_featured") is not None:
            stmt = stmt.where(model.is_featured.is_(bool(filters["is_featured"])))

        stmt = stmt.order_by(model.is_featured.desc(), model.id.desc())

        limit = filters.get("limit")
        if limit:
            stmt = stmt.limit(int(limit))
        return stmt

    def lodging_statement(self, filters: dict[str, Any]) -> Select:
        stmt = select(Hotel, Location.name).outerjoin(Location, Hotel.location_id == Location.id)
        if filters.get("accommodation_type"):
            stmt = stmt.where(Hotel.accommodation_type == filters["accommodation_type"])
        return self._apply_common_filters(stmt, Hotel, filters, Hotel.star_rate)

    def restaurants_statement(self, filters: dict[str, Any]) -> Select:
        stmt = (
            select(Restaurant, Location.name, RestaurantCategory.name)
            .outerjoin(Location, Restaurant.location_id == Location.id)
            .outerjoin(RestaurantCategory, Restaurant.category_id == RestaurantCategory.id)
        )
        if filters.get("category"):
            stmt = stmt.where(RestaurantCategory.name.ilike(f"%{filters['category']}%"))
        return self._apply_common_filters(stmt, Restaurant, filters, Restaurant.review_score)

    def tours_statement(self, filters: dict[str, Any]) -> Select:
        stmt = (
            select(Tour, Location.name, TourCategory.name)
            .outerjoin(Location, Tour.location_id == Location.id)
            .outerjoin(TourCategory, Tour.category_id == TourCategory.id)
        )
        if filters.get("category"):
            stmt = stmt.where(TourCategory.name.ilike(f"%{filters['category']}%"))
        if filters.get("min_duration") is not None:
            stmt = stmt.where(Tour.duration_hours >= filters["min_duration"])
        if filters.get("max_duration") is not None:
            stmt = stmt.where(Tour.duration_hours <= filters["max_duration"])
        return self._apply_common_filters(stmt, Tour, filters, Tour.review_score)

    def vehicles_statement(self, filters: dict[str, Any]) -> Select:
        stmt = select(Car, Location.name).outerjoin(Location, Car.location_id == Location.id)
        if filters.get("category"):
            stmt = stmt.where(Car.vehicle_type.ilike(f"%{filters['category']}%"))
        return self._apply_common_filters(stmt, Car, filters, Car.review_score)

    def location_info_statement(self, name: str) -> Select:
        return (
            select(Location)
            .where(Location.status == PublishStatus.PUBLISH.value)
            .where(Location.name.ilike(f"%{name}%"))
            .order_by(Location.id.desc())
            .limit(1)
        )

    def articles_statement(self, keyword: str) -> Select:
        pattern = f"%{keyword}%"
        return (
            select(NewsArticle)
            .where(NewsArticle.status == PublishStatus.PUBLISH.value)
            .where(or_(NewsArticle.title.ilike(pattern), NewsArticle.content.ilike(pattern)))
            .order_by(NewsArticle.created_at.desc())
            .limit(ARTICLE_SEARCH_LIMIT)
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _fetch(self, collection: str, stmt: Select) -> list[Any]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error(
                f"Catalog lookup failed | collection={collection} | error={e}",
                exc_info=True,
            )
            raise CatalogLookupError(f"Catalog lookup failed for {collection}") from e

        logger.info(f"Catalog lookup | collection={collection} | results={len(rows)}")
        return rows

    @staticmethod
    def _item_record(item: Any, location: str | None, category: str | None = None) -> CatalogRecord:
        return {
            "id": item.id,
            "title": item.title,
            "slug": item.slug,
            "content": item.content,
            "short_desc": item.short_desc,
            "price": _as_float(item.price),
            "sale_price": _as_float(item.sale_price),
            "review_score": _as_float(item.review_score),
            "gallery": list(item.gallery or []),
            "tags": list(item.tags or []),
            "is_featured": item.is_featured,
            "location": location,
            "category": category,
        }

    async def query_lodging(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        rows = await self._fetch("hotels", self.lodging_statement(filters))
        records = []
        for hotel, location in rows:
            record = self._item_record(hotel, location)
            record["accommodation_type"] = hotel.accommodation_type
            record["star_rate"] = hotel.star_rate
            records.append(record)
        return records

    async def query_restaurants(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        rows = await self._fetch("restaurants", self.restaurants_statement(filters))
        return [
            self._item_record(restaurant, location, category)
            for restaurant, location, category in rows
        ]

    async def query_tours(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        rows = await self._fetch("tours", self.tours_statement(filters))
        records = []
        for tour, location, category in rows:
            record = self._item_record(tour, location, category)
            record["duration_hours"] = _as_float(tour.duration_hours)
            records.append(record)
        return records

    async def query_vehicles(self, filters: dict[str, Any]) -> list[CatalogRecord]:
        rows = await self._fetch("cars", self.vehicles_statement(filters))
        records = []
        for car, location in rows:
            record = self._item_record(car, location, car.vehicle_type)
            record["passengers"] = car.passengers
            records.append(record)
        return records

    async def query_location_info(self, name: str) -> list[CatalogRecord]:
        rows = await self._fetch("locations", self.location_info_statement(name))
        return [
            {
                "id": location.id,
                "title": location.name,
                "name": location.name,
                "slug": location.slug,
                "content": location.content,
            }
            for (location,) in rows
        ]

    async def search_articles(self, keyword: str) -> list[CatalogRecord]:
        rows = await self._fetch("news_articles", self.articles_statement(keyword))
        return [
            {
                "id": article.id,
                "title": article.title,
                "slug": article.slug,
                "content": article.content,
                "created_at": article.created_at.isoformat() if article.created_at else None,
            }
            for (article,) in rows
        ]
