"""Failures that halt an analysis run at a given stage."""

from services.pipeline.stages import RunState, Stage


class StageFailure(Exception):
    """A run stopped at ``stage``. ``reason`` is the human-readable status."""

    def __init__(self, stage: Stage, reason: str, detail: str | None = None) -> None:
        super().__init__(f"{stage.value}: {reason}")
        self.stage = stage
        self.reason = reason
        self.detail = detail
        self.state: RunState | None = None  # set by the orchestrator when the run halts


class TransportFailure(StageFailure):
    """A gateway was unreachable or returned nothing."""


class ConversionFailure(StageFailure):
    """The source document could not be turned into a preview image."""


class ExtractionFailure(StageFailure):
    """The AI reply could not be coerced into a feedback document."""


class PersistenceFailure(StageFailure):
    """The key-value store rejected a read or write."""
