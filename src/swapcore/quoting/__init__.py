from .engine import QuoteEngine, estimate_price_impact
from .quote import (
    DegradedQuote,
    EstimatedQuote,
    EstimateReason,
    LiveQuote,
    Quote,
    QuoteKind,
    QuoteRequest,
)
from .tracker import QuoteTracker

__all__ = (
    "DegradedQuote",
    "EstimateReason",
    "EstimatedQuote",
    "LiveQuote",
    "Quote",
    "QuoteEngine",
    "QuoteKind",
    "QuoteRequest",
    "QuoteTracker",
    "estimate_price_impact",
)
