"""
Common schemas shared across different API endpoints
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class BoundingBoxSchema(BaseModel):
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class ErrorSchema(BaseModel):
    message: str
    category: str


class ProgressSchema(BaseModel):
    percent: int
    status: str
    failed: bool = False


class SessionStatusSchema(BaseModel):
    hasCredential: bool
    credentialMode: str
    documentLoaded: bool
    fileName: Optional[str] = None


class CredentialRequestSchema(BaseModel):
    apiKey: str
