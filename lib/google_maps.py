# =============================================================================
# lib/google_maps.py - Google Maps Web Service Proxy
# =============================================================================
# Keeps the Maps API key on the server. The browser names an endpoint and its
# parameters; this module builds the upstream request and relays the JSON.
#
# Supported endpoints:
# - places-autocomplete: input, types (default "address"), location, radius
# - place-details:       place_id, fields
# - geocode:             address OR latlng
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config import settings
from app.exceptions import ConfigurationError, GatewayError, ValidationError

logger = logging.getLogger(__name__)

MAPS_BASE_URL = "https://maps.googleapis.com/maps/api"
DEFAULT_DETAIL_FIELDS = "formatted_address,address_components,geometry"


def build_request(endpoint: str | None, body: dict[str, Any]) -> tuple[str, dict[str, Any]]:
    """
    Map a proxy request onto an upstream URL and query parameters.

    The API key is not included; proxy() adds it.

    Raises:
        ValidationError: Missing/unknown endpoint or missing geocode target
    """
    if not endpoint:
        raise ValidationError("Missing endpoint parameter")

    if endpoint == "places-autocomplete":
        params: dict[str, Any] = {
            "input": body.get("input") or "",
            "types": body.get("types") or "address",
        }
        if body.get("location"):
            params["location"] = body["location"]
        if body.get("radius"):
            params["radius"] = body["radius"]
        return f"{MAPS_BASE_URL}/place/autocomplete/json", params

    if endpoint == "place-details":
        if not body.get("place_id"):
            raise ValidationError("place_id is required")
        return f"{MAPS_BASE_URL}/place/details/json", {
            "place_id": body["place_id"],
            "fields": body.get("fields") or DEFAULT_DETAIL_FIELDS,
        }

    if endpoint == "geocode":
        if body.get("address"):
            return f"{MAPS_BASE_URL}/geocode/json", {"address": body["address"]}
        if body.get("latlng"):
            return f"{MAPS_BASE_URL}/geocode/json", {"latlng": body["latlng"]}
        raise ValidationError("address or latlng is required")

    raise ValidationError("Invalid endpoint")


def proxy(body: dict[str, Any], client: httpx.Client | None = None) -> tuple[int, Any]:
    """
    Forward a proxy request to Google Maps.

    Returns:
        Tuple of (upstream HTTP status, upstream JSON body)

    Raises:
        ConfigurationError: If GOOGLE_MAPS_API_KEY is not set
        ValidationError: If the request names no valid endpoint
        GatewayError: If Google cannot be reached
    """
    if not settings.GOOGLE_MAPS_API_KEY:
        raise ConfigurationError("Google Maps API key not configured")

    url, params = build_request(body.get("endpoint"), body)
    params["key"] = settings.GOOGLE_MAPS_API_KEY

    http = client or httpx.Client(timeout=settings.GATEWAY_TIMEOUT_SECONDS)
    try:
        response = http.get(url, params=params)
        payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Google Maps {body.get('endpoint')} request failed: {e}")
        raise GatewayError("Internal server error", provider="google_maps", status_code=500)
    finally:
        if client is None:
            http.close()

    return response.status_code, payload
