"""
Rule-based text classification.

- KeywordClassifier: message → topic Intent (fixed priority, fixed confidence)
- PreferenceExtractor: message → structured filter hints, one rule table per topic
"""

from agent.classification.keyword_classifier import KeywordClassifier
from agent.classification.preference_extractor import (
    GENERAL_EXTRACTOR,
    TOPIC_EXTRACTORS,
    PreferenceExtractor,
)

__all__ = [
    "KeywordClassifier",
    "PreferenceExtractor",
    "GENERAL_EXTRACTOR",
    "TOPIC_EXTRACTORS",
]
