"""Pydantic request and response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Request fields are optional on purpose: a missing field is answered by the
# gateway with a 400 "missing_fields" rejection, not by schema validation.


class OtpRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=320)


class OtpRequestResponse(BaseModel):
    acknowledged: bool
    expiresAt: datetime


class OtpVerifyRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=320)
    code: Optional[str] = Field(None, max_length=16)


class AcknowledgedResponse(BaseModel):
    acknowledged: bool


class PasswordResetRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=320)


class PasswordResetResponse(BaseModel):
    acknowledged: bool
    note: str


class SubscribeRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=320)
    plan: Optional[str] = Field(None, description="free / bronze / silver / gold")


class Invoice(BaseModel):
    email: str
    plan: str
    amount: int
    date: datetime


class SubscribeResponse(BaseModel):
    acknowledged: bool
    invoice: Invoice


class TextPost(BaseModel):
    """Body of ``POST /post``; anything beyond the known fields is kept as is."""

    model_config = ConfigDict(extra="allow")

    email: str = Field(..., min_length=1, max_length=320)
    type: str = "text"


class Post(BaseModel):
    """A stored post; text and audio posts share the collection."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")
    type: str = "text"
    email: Optional[str] = None


class AudioPost(Post):
    type: Literal["audio"] = "audio"
    file: str
    duration: float
    createdAt: datetime


class UploadResponse(BaseModel):
    acknowledged: bool
    post: AudioPost


class InsertResponse(BaseModel):
    acknowledged: bool
    insertedId: str


class UpdateResponse(BaseModel):
    acknowledged: bool
    modifiedCount: Optional[int] = None
    upsertedId: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    store: str
