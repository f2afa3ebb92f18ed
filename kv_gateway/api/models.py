"""Request and response bodies for the gateway routes."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, StrictStr


class GetRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: StrictStr


class GetResponse(BaseModel):
    key: str
    value: str


class SetRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: StrictStr
    value: StrictStr


class SetResponse(BaseModel):
    """Acknowledgement of a completed write; carries no previous value."""

    status: Literal["accepted"] = "accepted"
    key: str
