"""Common schema primitives."""

from pydantic import BaseModel, ConfigDict


class APIModel(BaseModel):
    """Base API model with attribute validation enabled."""

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(APIModel):
    """Error payload returned for domain failures."""

    detail: str
    errors: list[str] | None = None


class HealthResponse(APIModel):
    """Service health payload."""

    status: str
    timestamp: str
    service: str
