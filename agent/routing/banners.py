"""
Static banner content shown above the chat, one entry per banner type.
"""

from typing import Any

DEFAULT_BANNER = "general"

BANNERS: dict[str, dict[str, Any]] = {
    "general": {
        "title": "Descubre Samaná",
        "subtitle": "Un paraíso en República Dominicana",
        "image_url": "/assets/images/banner_general.jpg",
        "action": {"text": "Explorar", "url": "/explore"},
    },
    "accommodation": {
        "title": "Alojamientos en Samaná",
        "subtitle": "Desde hoteles de lujo hasta villas privadas",
        "image_url": "/assets/images/banner_accommodation.jpg",
        "action": {"text": "Ver alojamientos", "url": "/hotels"},
    },
    "gastronomy": {
        "title": "Sabores de Samaná",
        "subtitle": "Descubre la gastronomía local",
        "image_url": "/assets/images/banner_gastronomy.jpg",
        "action": {"text": "Ver restaurantes", "url": "/restaurants"},
    },
    "activities": {
        "title": "Aventuras en Samaná",
        "subtitle": "Excursiones y actividades para todos",
        "image_url": "/assets/images/banner_activities.jpg",
        "action": {"text": "Ver actividades", "url": "/tours"},
    },
    "transport": {
        "title": "Transporte en Samaná",
        "subtitle": "Moverse por la península",
        "image_url": "/assets/images/banner_transport.jpg",
        "action": {"text": "Ver opciones", "url": "/cars"},
    },
}


def get_banner(banner_type: str | None) -> dict[str, Any]:
    """Banner for a type; unknown types get the general banner."""
    banner = BANNERS.get(banner_type or DEFAULT_BANNER, BANNERS[DEFAULT_BANNER])
    return {**banner, "action": dict(banner["action"])}
