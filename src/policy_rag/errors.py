"""Error kinds raised across the ingestion, query, and interaction-log layers."""

from __future__ import annotations


class PolicyRagError(Exception):
    """Base class for all errors raised by this package."""


# ---------------------------------------------------------------------------
# Capability boundaries (embedding, vector index, generation)
# ---------------------------------------------------------------------------


class CapabilityError(PolicyRagError):
    """An external capability failed; the current question cannot be answered."""


class EmbeddingFailed(CapabilityError):
    """The embedding provider rejected or failed the request."""


class IndexUnavailable(CapabilityError):
    """The vector index could not be reached or the operation failed."""


class GenerationFailed(CapabilityError):
    """The generation provider failed to return a completion."""


class MalformedModelOutput(PolicyRagError):
    """The model returned no tool call, or arguments that do not match the schema."""


# ---------------------------------------------------------------------------
# Interaction log
# ---------------------------------------------------------------------------


class LoggingFailed(PolicyRagError):
    """Writing to the interaction log failed."""


class InteractionConflict(LoggingFailed):
    """An interaction with this id has already been recorded."""

    def __init__(self, interaction_id: str):
        super().__init__(f"Interaction '{interaction_id}' already recorded")
        self.interaction_id = interaction_id


class UnknownInteraction(LoggingFailed):
    """Feedback arrived for an interaction id that was never recorded."""

    def __init__(self, interaction_id: str):
        super().__init__(f"Unknown interaction '{interaction_id}'")
        self.interaction_id = interaction_id


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


class IngestionIOError(PolicyRagError):
    """A corpus file could not be read."""
