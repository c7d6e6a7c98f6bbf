"""GET / — welcome payload for humans poking at the API."""

from fastapi import APIRouter

from tessa import __version__
from tessa.schemas.common import WelcomeResponse

router = APIRouter(tags=["Root"])


@router.get("/", response_model=WelcomeResponse, summary="API welcome message")
async def welcome() -> WelcomeResponse:
    return WelcomeResponse(message="Welcome to Tessa API", version=__version__, status="running")
