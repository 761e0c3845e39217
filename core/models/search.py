# =============================================================================
# core/models/search.py - Smart Search Schemas
# =============================================================================
# Ranking and matching happen inside the smart_search_providers database
# function; these models only describe its inputs and output rows.
# =============================================================================

from pydantic import BaseModel, Field, field_validator, model_validator


class SearchFilters(BaseModel):
    """
    Body of POST /search.

    Every field is optional. A request with no filters at all returns an
    empty result without touching the database.
    """

    search_term: str | None = None
    location: str | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    availability_only: bool | None = None
    user_lat: float | None = Field(default=None, ge=-90, le=90)
    user_lng: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def check_price_range(self) -> "SearchFilters":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price cannot be greater than max_price")
        return self

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)

    def to_rpc_params(self) -> dict:
        """Argument names expected by smart_search_providers."""
        return {
            "search_term": self.search_term or "",
            "search_location": self.location or "",
            "min_price": self.min_price,
            "max_price": self.max_price,
            "availability_only": bool(self.availability_only),
            "user_lat": self.user_lat,
            "user_lng": self.user_lng,
        }


class SearchResult(BaseModel):
    """One provider/service match returned by the database."""

    user_id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    profile_image_url: str | None = None
    skills: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    service_location: str | None = None
    city_or_state: str | None = None
    availability_status: str | None = None
    price_range_min: float | None = None
    price_range_max: float | None = None
    last_active: str | None = None
    service_id: str | None = None
    service_name: str | None = None
    service_description: str | None = None
    service_category: str | None = None
    service_price_min: float | None = None
    service_price_max: float | None = None
    match_score: float = 0

    @field_validator("skills", "tags", mode="before")
    @classmethod
    def null_list(cls, value):
        # users.skills and users.tags are nullable arrays
        return value if value is not None else []
