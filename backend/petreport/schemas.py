"""
PetReport Backend — Pydantic Response Schemas
===============================================

What:  Pydantic models for the response envelope shared by every endpoint.
How:   FastAPI uses these to serialize responses and generate OpenAPI docs.

Envelope:
    {"status": true|false, "message": "..."}
    Business routes add their own fields on top of this envelope.
"""

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    """Success/failure envelope returned by the root route and by rejections."""

    status: bool = Field(description="True on success, false on any failure")
    message: str = Field(description="Human-readable outcome")

