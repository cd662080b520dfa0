"""
Tests for TransportResponder.
"""

import pytest

from agent.responders.transport import (
    AIRPORT_TRANSFER_MESSAGE,
    CAR_RENTAL_MESSAGE,
    GENERAL_MESSAGE,
    PUBLIC_TRANSPORT_MESSAGE,
    TAXI_MESSAGE,
    TransportResponder,
    TransportSubIntent,
)
from tests.fakes import FakeCatalogGateway, make_record


class TestClassifySubIntent:
    """Tests for transport sub-intent classification."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Quiero alquilar un coche", TransportSubIntent.CAR_RENTAL),
            ("¿Dónde puedo conseguir un coche?", TransportSubIntent.CAR_RENTAL),
            ("Traslado desde el aeropuerto", TransportSubIntent.AIRPORT_TRANSFER),
            ("¿Hay guagua a Las Terrenas?", TransportSubIntent.PUBLIC_TRANSPORT),
            ("¿Hay uber?", TransportSubIntent.TAXI_INFO),
            ("¿Cómo me muevo?", TransportSubIntent.GENERAL),
        ],
    )
    def test_sub_intents(self, text, expected):
        """Test each keyword set maps to its transport sub-intent."""
        responder = TransportResponder(FakeCatalogGateway())
        assert responder.classify_sub_intent(text, {}) is expected


class TestCarRental:
    """Tests for vehicle rental listings."""

    @pytest.mark.asyncio
    async def test_filters_and_listing(self):
        """Test vehicle type and price become filters."""
        catalog = FakeCatalogGateway(vehicles=[make_record(1, "Jeep Wrangler", "4x4 ideal para la península")])
        response = await TransportResponder(catalog).respond({}, "Quiero alquilar un coche por 3 días barato")

        assert catalog.calls_to("query_vehicles") == [{"limit": 5, "category": "car", "max_price": 50}]
        assert "el vehículo Jeep Wrangler" in response.message
        assert response.ui["result_type"] == "car"
        assert response.ui["suggested_questions"][0] == "¿Cuánto cuesta alquilar Jeep Wrangler por día?"

    @pytest.mark.asyncio
    async def test_empty_catalog_returns_rental_overview(self):
        """Test empty lookups give the rental overview."""
        catalog = FakeCatalogGateway()
        response = await TransportResponder(catalog).respond({}, "Alquiler de vehículo")

        assert len(catalog.calls_to("query_vehicles")) == 2
        assert response.message == CAR_RENTAL_MESSAGE
        assert response.results == []
        assert response.ui["update_banner"] is True
        assert response.ui["banner_type"] == "transport"
        assert response.ui["banner_title"] == "Alquiler de Vehículos en Samaná"

    @pytest.mark.asyncio
    async def test_params_not_mutated(self):
        """Test carried params are not modified."""
        params = {"search_type": "car", "topic": "transport"}
        catalog = FakeCatalogGateway(vehicles=[make_record(1, "Jeep")])
        await TransportResponder(catalog).respond(params, "alquilar un coche por 2 días")
        assert params == {"search_type": "car", "topic": "transport"}


class TestOtherBranches:
    """Tests for the other transport answers."""

    @pytest.mark.asyncio
    async def test_airport_transfer(self):
        """Test airport transfer text comes with transfer tours."""
        catalog = FakeCatalogGateway(tours=[make_record(1, "Traslado Aeropuerto El Catey")])
        response = await TransportResponder(catalog).respond({}, "Traslado desde el aeropuerto")

        assert response.message == AIRPORT_TRANSFER_MESSAGE
        assert catalog.calls_to("query_tours") == [{"category": "transfer", "limit": 3}]
        assert response.results[0]["title"] == "Traslado Aeropuerto El Catey"

    @pytest.mark.asyncio
    async def test_public_transport(self):
        """Test public transport overview."""
        response = await TransportResponder(FakeCatalogGateway()).respond({}, "transporte público")
        assert response.message == PUBLIC_TRANSPORT_MESSAGE

    @pytest.mark.asyncio
    async def test_taxi(self):
        """Test taxi overview and banner title."""
        response = await TransportResponder(FakeCatalogGateway()).respond({}, "Necesito un taxi")
        assert response.message == TAXI_MESSAGE
        assert response.ui["banner_title"] == "Taxis en Samaná"

    @pytest.mark.asyncio
    async def test_general(self):
        """Test fall-through transport overview."""
        response = await TransportResponder(FakeCatalogGateway()).respond({}, "¿Cómo me muevo?")
        assert response.message == GENERAL_MESSAGE

    @pytest.mark.asyncio
    async def test_catalog_failure(self):
        """Test catalog failure becomes the transport apology."""
        response = await TransportResponder(FakeCatalogGateway(fail=True)).respond({}, "alquilar coche")
        assert response.error is True
        assert "transporte" in response.message
