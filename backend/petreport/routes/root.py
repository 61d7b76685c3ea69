"""
PetReport Backend — Root Route
================================

What:  GET / — a fixed welcome message, also usable as a liveness probe.
"""

from fastapi import APIRouter

from petreport.schemas import StatusResponse

router = APIRouter(tags=["Root"])

WELCOME_MESSAGE = "Welcome to pet missing report management backend application."


@router.get(
    "/",
    response_model=StatusResponse,
    summary="Welcome message",
)
async def root() -> StatusResponse:
    return StatusResponse(status=True, message=WELCOME_MESSAGE)
