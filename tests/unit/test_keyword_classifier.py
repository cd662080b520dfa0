"""
Tests for KeywordClassifier.

Coverage:
- One representative message per topic
- Priority order when several keyword sets match
- Fixed confidences and details
- Booking keyword detection
"""

import pytest

from agent.classification.keyword_classifier import KeywordClassifier
from agent.models import IntentType


@pytest.fixture
def classifier():
    return KeywordClassifier()


class TestClassify:
    """Topic classification."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Busco un hotel barato cerca de la playa", IntentType.ACCOMMODATION),
            ("¿Dónde puedo comer pescado?", IntentType.GASTRONOMY),
            ("Quiero hacer una excursión a Los Haitises", IntentType.ACTIVITIES),
            ("Necesito alquiler de coche", IntentType.TRANSPORT),
            ("Cuéntame sobre samana", IntentType.INFORMATION),
            ("Hola, buenos días", IntentType.GENERAL),
        ],
    )
    def test_topics(self, classifier, text, expected):
        """Test one message per topic."""
        assert classifier.classify(text).type is expected

    def test_case_insensitive(self, classifier):
        """Test matching ignores case."""
        assert classifier.classify("HOTEL en Las Terrenas").type is IntentType.ACCOMMODATION

    def test_accommodation_wins_over_gastronomy(self, classifier):
        """Sets are checked in priority order; first match wins."""
        intent = classifier.classify("Hotel con restaurante para comer")
        assert intent.type is IntentType.ACCOMMODATION

    def test_activities_wins_over_transport(self, classifier):
        """Test activities outranks transport."""
        intent = classifier.classify("Tour en coche por la península")
        assert intent.type is IntentType.ACTIVITIES

    def test_topic_confidence_and_details(self, classifier):
        """Test topic confidence and search type details."""
        intent = classifier.classify("Busco un restaurante")
        assert intent.confidence == 0.9
        assert intent.details == {"search_type": "restaurant"}

    def test_information_carries_location(self, classifier):
        """Test information intent carries the Samana location."""
        intent = classifier.classify("Quiero información de la zona")
        assert intent.type is IntentType.INFORMATION
        assert intent.confidence == 0.8
        assert intent.details == {"search_type": "information", "location": "Samana"}

    def test_general_fallback(self, classifier):
        """Test unmatched text is general with low confidence."""
        intent = classifier.classify("gracias")
        assert intent.confidence == 0.6
        assert intent.details == {"search_type": "general"}

    def test_empty_message_is_general(self, classifier):
        """Test empty text is general."""
        assert classifier.classify("").type is IntentType.GENERAL

    def test_details_are_copies(self, classifier):
        """Test returned details never alias the rule table."""
        first = classifier.classify("hotel")
        first.details["search_type"] = "mutated"
        assert classifier.classify("hotel").details["search_type"] == "accommodation"


class TestBookingRequest:
    """Booking keyword detection."""

    @pytest.mark.parametrize("text", ["Quiero reservar un hotel", "Hacer una reserva", "booking please"])
    def test_booking_keywords(self, text):
        """Test booking keywords are detected."""
        assert KeywordClassifier.is_booking_request(text) is True

    def test_no_booking_keywords(self):
        """Test plain searches are not bookings."""
        assert KeywordClassifier.is_booking_request("Busco un hotel") is False
