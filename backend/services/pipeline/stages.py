"""Ordered stages of one resume analysis run.

Each stage consumes the previous stage's output:

    Idle
      -> Uploading(file)        -> resume artifact ref
      -> ConvertingToImage      -> preview image
      -> UploadingImage         -> image artifact ref
      -> PersistingInitial      -> record with empty feedback
      -> InvokingAI             -> raw reply text
      -> ExtractingFeedback     -> FeedbackDocument
      -> PersistingFinal        -> record with feedback
      -> Complete

Any stage may end the run in Failed; nothing is retried or rolled back.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


class Stage(str, enum.Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    CONVERTING_TO_IMAGE = "converting_to_image"
    UPLOADING_IMAGE = "uploading_image"
    PERSISTING_INITIAL = "persisting_initial"
    INVOKING_AI = "invoking_ai"
    EXTRACTING_FEEDBACK = "extracting_feedback"
    PERSISTING_FINAL = "persisting_final"
    COMPLETE = "complete"
    FAILED = "failed"


ORDER = [
    Stage.UPLOADING,
    Stage.CONVERTING_TO_IMAGE,
    Stage.UPLOADING_IMAGE,
    Stage.PERSISTING_INITIAL,
    Stage.INVOKING_AI,
    Stage.EXTRACTING_FEEDBACK,
    Stage.PERSISTING_FINAL,
]

# Status shown while a stage runs
STATUS_TEXT = {
    Stage.IDLE: "",
    Stage.UPLOADING: "Uploading file...",
    Stage.CONVERTING_TO_IMAGE: "Converting to image...",
    Stage.UPLOADING_IMAGE: "Uploading image...",
    Stage.PERSISTING_INITIAL: "Preparing the data...",
    Stage.INVOKING_AI: "Analyzing data...",
    Stage.EXTRACTING_FEEDBACK: "Reading feedback...",
    Stage.PERSISTING_FINAL: "Saving feedback...",
    Stage.COMPLETE: "Analysis completed, redirecting...",
}

# Status shown when a stage fails (conversion surfaces the converter's own message)
FAILURE_TEXT = {
    Stage.UPLOADING: "Error: Failed to upload file...",
    Stage.CONVERTING_TO_IMAGE: "Error: Failed to convert PDF file to image...",
    Stage.UPLOADING_IMAGE: "Error: Failed to upload image...",
    Stage.PERSISTING_INITIAL: "Error: Failed to save the data...",
    Stage.INVOKING_AI: "Error: Failed to analyze resume...",
    Stage.EXTRACTING_FEEDBACK: "Error: Failed to read the analysis...",
    Stage.PERSISTING_FINAL: "Error: Failed to save the analysis...",
}


@dataclass
class RunState:
    """Mutable state of a single run, owned by the orchestrator."""
    stage: Stage = Stage.IDLE
    status_text: str = ""
    record_id: str | None = None
    failed_stage: Stage | None = None
    history: list[Stage] = field(default_factory=list)
    on_status: Callable[["RunState"], None] | None = field(default=None, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.stage in (Stage.COMPLETE, Stage.FAILED)

    def enter(self, stage: Stage) -> None:
        """Move to ``stage``. Stages must follow ORDER, then Complete."""
        if self.is_terminal:
            raise RuntimeError(f"Run already {self.stage.value}, cannot enter {stage.value}")
        done = len(self.history)
        expected = ORDER[done] if done < len(ORDER) else Stage.COMPLETE
        if stage != expected:
            raise RuntimeError(f"Stage {stage.value} entered out of order, expected {expected.value}")
        logger.info("Run %s: %s", self.record_id or "-", stage.value)
        self.stage = stage
        self.status_text = STATUS_TEXT[stage]
        self.history.append(stage)
        self._notify()

    def fail(self, stage: Stage, reason: str) -> None:
        self.stage = Stage.FAILED
        self.failed_stage = stage
        self.status_text = reason
        self._notify()

    def _notify(self) -> None:
        if self.on_status is not None:
            self.on_status(self)
