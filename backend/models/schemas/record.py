"""Persisted analysis record.

Serialized layout (camelCase keys) is shared with every reader of the
key-value store, so field aliases must not change.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from models.schemas.feedback import FeedbackDocument

KEY_PREFIX = "resume:"


def record_key(record_id: str) -> str:
    return f"{KEY_PREFIX}{record_id}"


class AnalysisRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    resume_path: str = Field(alias="resumePath")
    image_path: str = Field(alias="imagePath")
    company_name: str = Field("", alias="companyName")
    job_title: str = Field("", alias="jobTitle")
    job_description: str = Field("", alias="jobDescription")
    feedback: FeedbackDocument | Literal[""] = ""  # "" until the AI stage completes

    @property
    def key(self) -> str:
        return record_key(self.id)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
