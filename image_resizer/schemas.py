from pydantic import BaseModel, ConfigDict

from image_resizer.constants import PipelineStatus, StageAction, StageReason


class StageOutcome(BaseModel):
    """How one artifact (primary or thumbnail) was resolved."""

    model_config = ConfigDict(frozen=True)

    action: StageAction
    reason: StageReason
    destination_key: str | None = None
    width: int | None = None      # set only when action == RESIZED
    height: int | None = None


class PipelineResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: PipelineStatus
    source_bucket: str
    object_key: str
    primary: StageOutcome | None = None
    thumbnail: StageOutcome | None = None
