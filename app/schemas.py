"""Pydantic schemas for the Dress Try-On API."""

from typing import List, Optional
from pydantic import BaseModel, Field


class TryOnResponse(BaseModel):
    """Successful try-on. ``error`` is only set when the demo overlay degraded."""
    ok: bool = True
    status: str
    image: str = Field(..., description="Result image as a data URI")
    dressId: str
    dressSrc: Optional[str] = None
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response schema."""
    ok: bool = False
    code: str
    error: str


class DressItem(BaseModel):
    id: str
    title: str
    description: str
    src: str


class DressListResponse(BaseModel):
    dresses: List[DressItem]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
