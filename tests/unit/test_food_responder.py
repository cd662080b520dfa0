"""
Tests for FoodResponder.
"""

import pytest

from agent.responders.food import (
    DISHES,
    GENERAL_MESSAGE,
    LOCAL_CUISINE_MESSAGE,
    RESTAURANT_TEMPLATE,
    UNKNOWN_DISH_MESSAGE,
    FoodResponder,
    FoodSubIntent,
    find_dish,
)
from tests.fakes import FakeCatalogGateway, make_record


class TestClassifySubIntent:
    """Tests for food sub-intent classification."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Busco un restaurante", FoodSubIntent.RESTAURANT_RECOMMENDATION),
            ("Lugares donde comer bien", FoodSubIntent.RESTAURANT_RECOMMENDATION),
            ("Háblame de la comida típica", FoodSubIntent.LOCAL_CUISINE),
            ("¿Qué es el sancocho?", FoodSubIntent.DISH_INFO),
            ("Tengo hambre", FoodSubIntent.GENERAL),
        ],
    )
    def test_sub_intents(self, text, expected):
        """Test each keyword set maps to its food sub-intent."""
        assert FoodResponder(FakeCatalogGateway()).classify_sub_intent(text, {}) is expected


class TestRestaurantRecommendations:
    """Tests for restaurant listings."""

    @pytest.mark.asyncio
    async def test_filters(self):
        """Test cuisine and cheap price become catalog filters."""
        catalog = FakeCatalogGateway(restaurants=[make_record(1, "La Terrasse", "cocina francesa")])
        response = await FoodResponder(catalog).respond({}, "Busco restaurante de pizza barato")

        assert catalog.calls_to("query_restaurants") == [
            {"limit": 5, "category": "italian", "max_price": 30}
        ]
        assert response.message.startswith(
            "Basándome en tus preferencias, te recomiendo el restaurante La Terrasse. "
        )
        assert response.ui["result_type"] == "restaurant"
        assert response.ui["banner_type"] == "gastronomy"
        assert response.ui["suggested_questions"][0] == "¿Qué tipo de comida sirven en La Terrasse?"

    @pytest.mark.asyncio
    async def test_expensive(self):
        """Test exclusive places set the minimum price."""
        catalog = FakeCatalogGateway(restaurants=[make_record(1, "A")])
        await FoodResponder(catalog).respond({}, "Un restaurante exclusivo")
        assert catalog.calls_to("query_restaurants")[0]["min_price"] == 50

    @pytest.mark.asyncio
    async def test_no_results(self):
        """Test empty catalog gives the no-results reply."""
        response = await FoodResponder(FakeCatalogGateway()).respond({}, "Busco un restaurante")
        assert response.message == RESTAURANT_TEMPLATE.no_results_message
        assert response.results == []


class TestDishInfo:
    """Tests for the fixed dish table."""

    def test_find_dish_checks_table_order(self):
        """Test dish lookup follows table order."""
        assert find_dish("¿Qué es el pescado con coco?") == "pescado con coco"
        assert find_dish("nada") is None

    @pytest.mark.asyncio
    async def test_mofongo(self):
        """Test known dish reply names its restaurants without a lookup."""
        catalog = FakeCatalogGateway()
        response = await FoodResponder(catalog).respond({}, "¿Qué es el mofongo?")

        assert response.message.startswith(DISHES["mofongo"].description)
        assert (
            "Puedes probar excelente mofongo en restaurantes como "
            "El Mofongo Loco, Restaurante Luis, La Casa de Doña Chichi."
        ) in response.message
        assert response.ui["suggested_questions"][0] == "¿Dónde está ubicado El Mofongo Loco?"
        assert catalog.calls == []

    @pytest.mark.asyncio
    async def test_unknown_dish(self):
        """Test unknown dishes get the fallback reply."""
        response = await FoodResponder(FakeCatalogGateway()).respond({}, "¿Qué es el chivo guisado?")
        assert response.message == UNKNOWN_DISH_MESSAGE
        assert "update_banner" not in response.ui


class TestCannedReplies:
    """Tests for fixed gastronomy answers."""

    @pytest.mark.asyncio
    async def test_local_cuisine(self):
        """Test local cuisine overview."""
        response = await FoodResponder(FakeCatalogGateway()).respond({}, "platos dominicanos")
        assert response.message == LOCAL_CUISINE_MESSAGE
        assert response.ui["banner_type"] == "gastronomy"

    @pytest.mark.asyncio
    async def test_general(self):
        """Test fall-through gastronomy overview."""
        response = await FoodResponder(FakeCatalogGateway()).respond({}, "gastronomía")
        assert response.message == GENERAL_MESSAGE


class TestFailures:
    """Tests for food responder failures."""

    @pytest.mark.asyncio
    async def test_catalog_failure(self):
        """Test catalog failure becomes the gastronomy apology."""
        response = await FoodResponder(FakeCatalogGateway(fail=True)).respond({}, "Busco un restaurante")
        assert response.error is True
        assert "gastronomía" in response.message
