"""Pydantic contracts for the submission HTTP endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateSubmissionRequest(_CamelModel):
    """Body of ``POST /createSubmissionSession``."""

    content_type: Literal["image/jpeg"]
    size_bytes: int = Field(gt=0)
    image_hash: str = Field(
        pattern=r"^[a-f0-9]{64}$",
        validation_alias=AliasChoices("imageHash", "imageSha256", "image_hash"),
    )
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    taken_at: str | None = None

    @field_validator("taken_at")
    @classmethod
    def _check_taken_at(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValueError("takenAt must be an ISO-8601 datetime") from exc
        return value


class CreateSubmissionResponse(_CamelModel):
    """Successful response of ``POST /createSubmissionSession``."""

    submission_id: str
    upload_url: str
    upload_token: str | None
    upload_headers: dict[str, str]
    nonce: str
    expires_at: str
    bucket_path: str


class CompleteSubmissionRequest(_CamelModel):
    """Body of ``POST /completeSubmission``."""

    submission_id: str = Field(min_length=1)
    nonce: str = Field(min_length=1)


class CompleteSubmissionResponse(BaseModel):
    """Successful response of ``POST /completeSubmission``."""

    status: str = "ok"
