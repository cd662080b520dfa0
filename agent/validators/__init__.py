"""
Response validation for the chat pipeline.

- ResponseValidator: terminal stage applied to every outgoing Response
  (fallback text, length cap, disallowed content, relevance lead-in, UI and
  results normalization)
"""

from agent.validators.response_validator import (
    FALLBACK_MESSAGE,
    REFUSAL_MESSAGE,
    VALIDATOR_NAME,
    ResponseValidator,
)

__all__ = [
    "ResponseValidator",
    "FALLBACK_MESSAGE",
    "REFUSAL_MESSAGE",
    "VALIDATOR_NAME",
]
