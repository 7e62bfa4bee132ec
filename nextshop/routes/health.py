"""
NextShop Catalog — Banner and Health Check Routes
===================================================

What:  GET / (plain-text banner) and GET /ping (database round-trip).
How:   /ping sends the MongoDB `ping` command through the shared connection
       and reports the outcome as plain text with status 200 or 500.
Who:   Called by uptime monitors, load balancers, and humans with curl.

/ping is "healthy" only while the store answers; a connection that was
never established or has dropped both report 500.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from nextshop.database import mongo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/",
    response_class=PlainTextResponse,
    summary="Service banner",
)
async def root() -> str:
    return "NextShop API is running!"


@router.get(
    "/ping",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "MongoDB answered the ping"},
        500: {"description": "MongoDB is unreachable"},
    },
    summary="Database connectivity check",
)
async def ping() -> PlainTextResponse:
    """
    Issue `{"ping": 1}` against the configured database.

    No structured payload: the body is a human-readable sentence.
    """
    try:
        await mongo.ping()
    except Exception as e:
        logger.warning("Health check: MongoDB unreachable: %s", str(e))
        return PlainTextResponse("MongoDB connection failed", status_code=500)

    return PlainTextResponse("Pinged MongoDB successfully!")
