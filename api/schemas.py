"""
schemas.py

Pydantic v2 models for the JSON envelopes returned by the API.

Field names match the wire format exactly (``createdAt`` included), so the
models are dumped as-is without aliasing.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PredictionData(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    result: Literal["Cancer", "Non-cancer"]
    suggestion: str
    createdAt: str = Field(default_factory=utc_timestamp)


class PredictResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str = "Prediction completed successfully"
    data: PredictionData


class FailResponse(BaseModel):
    status: Literal["fail"] = "fail"
    message: str
    error: Optional[str] = None
