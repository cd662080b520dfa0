"""
Routing layer for the chat pipeline.

Key components:
- Coordinator: classifies the first turn and emits the NextAction
- TurnDispatcher: resumes the persisted processing stage and always ends in
  the ResponseValidator
- banners: static banner table per banner type

Architecture:
    message + context → TurnDispatcher
        ├─ initial → Coordinator → NextAction
        │     ├─ query   → QueryResponder → topic responder
        │     ├─ booking → BookingResponder
        │     └─ respond → fixed text
        ├─ query   → QueryResponder
        ├─ booking → BookingResponder
        └─ generic → GenericResponder (completion provider)
            ↓
        ResponseValidator → Response (+ context patch)
"""

from agent.routing.banners import get_banner
from agent.routing.coordinator import Coordinator
from agent.routing.turn_dispatcher import TurnDispatcher

__all__ = [
    "Coordinator",
    "TurnDispatcher",
    "get_banner",
]
