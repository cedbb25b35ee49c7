"""Card body formatting and card request assembly."""

from cardbridge.cards.formatter import format_card_body, parse_card_body
from cardbridge.cards.requests import (
    CardRequest,
    Resolution,
    ResolutionStatus,
    build_card_request,
    build_card_requests,
)

__all__ = [
    "CardRequest",
    "Resolution",
    "ResolutionStatus",
    "build_card_request",
    "build_card_requests",
    "format_card_body",
    "parse_card_body",
]
