"""Alert request and response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cloudguard.models.alert import Alert
from cloudguard.schemas.common import APIModel


class StatusUpdateRequest(BaseModel):
    """Status change payload."""

    status: str | None = None


class AlertResponse(APIModel):
    """Serialized alert."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    severity: str
    category: str
    status: str
    description: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    @classmethod
    def from_entity(cls, alert: Alert) -> "AlertResponse":
        """Build a response from an alert entity.

        Parameters
        ----------
        alert : Alert
            Alert to serialize.

        Returns
        -------
        AlertResponse
            Response model.
        """
        return cls.model_validate(alert.to_dict())
