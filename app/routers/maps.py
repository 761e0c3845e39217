# =============================================================================
# app/routers/maps.py - Google Maps Proxy Endpoint
# =============================================================================

from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from lib import google_maps

router = APIRouter()


@router.post("/maps")
async def maps_proxy(body: dict[str, Any] = Body(...)):
    """
    Forward a Places/Geocoding request with the server-held API key.

    Example body:
        {"endpoint": "places-autocomplete", "input": "12 Admiralty Way"}

    The upstream status code and JSON are relayed unchanged.
    """
    status_code, payload = google_maps.proxy(body)
    return JSONResponse(status_code=status_code, content=payload)
