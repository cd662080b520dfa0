"""
Tests for SQLCatalogGateway.

Statements are compiled with the PostgreSQL dialect and inspected; execution
uses a mocked session factory (no database required).
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from agent.services.catalog_gateway import (
    CatalogLookupError,
    SQLCatalogGateway,
)


def compile_statement(stmt):
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), list(compiled.params.values())


def session_factory_returning(rows=None, error=None):
    session = MagicMock()
    if error is not None:
        session.execute = AsyncMock(side_effect=error)
    else:
        result = MagicMock()
        result.all.return_value = rows or []
        session.execute = AsyncMock(return_value=result)

    @asynccontextmanager
    async def factory():
        yield session

    return factory, session


@pytest.fixture
def gateway():
    return SQLCatalogGateway(session_factory=session_factory_returning()[0])


class TestStatements:
    """Tests for the compiled catalog SELECT statements."""

    def test_only_published_featured_first(self, gateway):
        """Test only published rows, featured first, no default limit."""
        sql, params = compile_statement(gateway.lodging_statement({}))

        assert "hotels.status = " in sql
        assert "publish" in params
        assert "ORDER BY hotels.is_featured DESC, hotels.id DESC" in sql
        assert "LIMIT" not in sql

    def test_lodging_filters(self, gateway):
        """Test every lodging filter key becomes a clause and unknown keys are ignored."""
        sql, params = compile_statement(
            gateway.lodging_statement(
                {
                    "accommodation_type": "villa",
                    "location": "playa",
                    "max_price": 100,
                    "rating": 4,
                    "has_pool": True,
                    "group_type": "family",
                    "limit": 5,
                    "unknown_key": "ignored",
                }
            )
        )

        assert "hotels.accommodation_type = " in sql
        assert "locations.name ILIKE" in sql
        assert "array_to_string(hotels.tags" in sql
        assert "hotels.price <=" in sql
        assert "hotels.sale_price <=" in sql
        assert "hotels.star_rate >=" in sql
        assert "ANY (hotels.tags)" in sql
        assert "LIMIT" in sql
        assert "villa" in params
        assert "%playa%" in params
        assert "pool" in params
        assert "family" in params

    def test_featured_filter(self, gateway):
        """Test the featured fallback filter."""
        sql, _ = compile_statement(gateway.lodging_statement({"is_featured": True, "limit": 3}))
        assert "hotels.is_featured IS" in sql

    def test_restaurant_category(self, gateway):
        """Test restaurant category join and minimum price."""
        sql, params = compile_statement(
            gateway.restaurants_statement({"category": "seafood", "min_price": 10})
        )
        assert "restaurant_categories.name ILIKE" in sql
        assert "restaurants.price >=" in sql
        assert "%seafood%" in params

    def test_restaurant_rating_uses_review_score(self, gateway):
        """Test restaurant rating filters on review_score."""
        sql, _ = compile_statement(gateway.restaurants_statement({"rating": 4}))
        assert "restaurants.review_score >=" in sql

    def test_tour_duration(self, gateway):
        """Test tour category and duration bounds."""
        sql, params = compile_statement(
            gateway.tours_statement({"category": "boat", "min_duration": 3, "max_duration": 8})
        )
        assert "tour_categories.name ILIKE" in sql
        assert "tours.duration_hours >=" in sql
        assert "tours.duration_hours <=" in sql
        assert "%boat%" in params

    def test_vehicle_category(self, gateway):
        """Test vehicle category matches vehicle_type."""
        sql, params = compile_statement(gateway.vehicles_statement({"category": "scooter"}))
        assert "cars.vehicle_type ILIKE" in sql
        assert "%scooter%" in params

    def test_location_info(self, gateway):
        """Test location lookup by partial name, newest first."""
        sql, params = compile_statement(gateway.location_info_statement("Samana"))
        assert "locations.name ILIKE" in sql
        assert "ORDER BY locations.id DESC" in sql
        assert "LIMIT" in sql
        assert "%Samana%" in params

    def test_articles(self, gateway):
        """Test article search over title and content."""
        sql, params = compile_statement(gateway.articles_statement("ballenas"))
        assert "news_articles.title ILIKE" in sql
        assert "news_articles.content ILIKE" in sql
        assert "ORDER BY news_articles.created_at DESC" in sql
        assert "%ballenas%" in params


def make_hotel(**overrides):
    values = {
        "id": 7,
        "title": "Hotel Bahía",
        "slug": "hotel-bahia",
        "content": "Vistas al mar",
        "short_desc": "Frente a la bahía",
        "price": Decimal("120.00"),
        "sale_price": None,
        "review_score": Decimal("4.5"),
        "gallery": ["/img/bahia.jpg"],
        "tags": ["pool", "family"],
        "is_featured": True,
        "accommodation_type": "hotel",
        "star_rate": 4,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestExecution:
    """Tests for statement execution over a mocked session."""

    @pytest.mark.asyncio
    async def test_query_lodging_records(self):
        """Test rows are flattened into plain records."""
        factory, session = session_factory_returning(rows=[(make_hotel(), "Las Terrenas")])

        records = await SQLCatalogGateway(session_factory=factory).query_lodging({"limit": 3})

        assert records == [
            {
                "id": 7,
                "title": "Hotel Bahía",
                "slug": "hotel-bahia",
                "content": "Vistas al mar",
                "short_desc": "Frente a la bahía",
                "price": 120.0,
                "sale_price": None,
                "review_score": 4.5,
                "gallery": ["/img/bahia.jpg"],
                "tags": ["pool", "family"],
                "is_featured": True,
                "location": "Las Terrenas",
                "category": None,
                "accommodation_type": "hotel",
                "star_rate": 4,
            }
        ]
        session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_query_vehicles_category_from_type(self):
        """Test vehicle category comes from vehicle_type."""
        car = make_hotel(id=3, title="Jeep Wrangler", slug="jeep", vehicle_type="jeep", passengers=5, gallery=None)
        factory, _ = session_factory_returning(rows=[(car, None)])

        records = await SQLCatalogGateway(session_factory=factory).query_vehicles({})

        assert records[0]["category"] == "jeep"
        assert records[0]["passengers"] == 5
        assert records[0]["gallery"] == []

    @pytest.mark.asyncio
    async def test_location_info_records(self):
        """Test location rows expose name as title."""
        location = SimpleNamespace(id=1, name="Samaná", slug="samana", content="Península")
        factory, _ = session_factory_returning(rows=[(location,)])

        records = await SQLCatalogGateway(session_factory=factory).query_location_info("Samana")

        assert records == [
            {"id": 1, "title": "Samaná", "name": "Samaná", "slug": "samana", "content": "Península"}
        ]

    @pytest.mark.asyncio
    async def test_database_error_becomes_lookup_error(self):
        """Test database errors are wrapped with the table name."""
        factory, _ = session_factory_returning(error=OperationalError("SELECT 1", {}, Exception("down")))

        with pytest.raises(CatalogLookupError, match="hotels"):
            await SQLCatalogGateway(session_factory=factory).query_lodging({})
