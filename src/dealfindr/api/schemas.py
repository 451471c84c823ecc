# src/dealfindr/api/schemas.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


# --------------------------------------------
# Assess
# --------------------------------------------

class AssessRequest(BaseModel):
    """
    Body for POST /assess.

    `opportunity` and `criteria` stay as raw dicts: they are coerced and
    validated by the service layer so string/percent inputs from the forms
    are accepted.
    """
    model_config = ConfigDict(extra="allow")

    opportunity: dict[str, Any] | None = None
    criteria: dict[str, Any] | None = None
    quick: bool = False


class AssessResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = True
    result: dict[str, Any]


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
