"""
Failure taxonomy for the chat pipeline.

Every failure carries its underlying cause via ``raise ... from exc`` so the
detail can be logged for operators while callers only see a fixed message.
"""


class TravelCompanionError(Exception):
    """Base class for failures raised while answering a query."""


class RetrievalFailure(TravelCompanionError):
    """Embedding or similarity-search failure. Always fatal for the request."""


class CompositionFailure(TravelCompanionError):
    """Context fusion or prompt seeding received malformed input."""


class ModelCallFailure(TravelCompanionError):
    """The language model provider failed."""
