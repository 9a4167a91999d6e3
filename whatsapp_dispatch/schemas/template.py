from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TemplateDefinition(BaseModel):
    """
    A pre-approved WhatsApp template registered with the gateway.
    Positional arguments fill the `{{n}}` placeholders of `body` in order.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "vehicle_checkin",
                "name": "Vehicle Check-in",
                "description": "Sent when a vehicle is checked in at a venue.",
                "body": "Hi {{1}}, vehicle {{2}} was checked in at {{3}} at {{4}}.",
                "arg_count": 4,
                "arg_descriptions": [
                    "Customer name",
                    "Vehicle number",
                    "Check-in time",
                    "Venue name",
                ],
                "sample_args": ["Test User", "TEST123", "12:00 PM", "Test Venue"],
                "has_image": False,
            }
        },
    )

    id: str = Field(..., description="Template identifier known to the gateway.")
    name: str
    description: str
    body: str = Field(..., description="Display text with {{n}} placeholders.")
    arg_count: int = Field(..., ge=0)
    arg_descriptions: Tuple[str, ...]
    sample_args: Tuple[str, ...]
    has_image: bool = False

    def describe(self) -> dict:
        """Public listing shape used by the template discovery endpoint."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "argCount": self.arg_count,
            "argDescriptions": list(self.arg_descriptions),
            "hasImage": self.has_image,
            "sampleArgs": list(self.sample_args),
        }


class ApprovalStatus(str, Enum):
    """Approval state of a template at the gateway."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TemplateApprovalRecord(BaseModel):
    """
    Persisted approval state of a template, maintained by the template sync job.

    `status` is kept as the gateway reported it (lowercased). Values outside
    ApprovalStatus, such as "paused" or "disabled", are valid records.
    """

    template_id: str
    status: str = ApprovalStatus.PENDING.value
    is_active: bool = True
    last_synced_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        # The sync job stores whatever casing the gateway returned
        if isinstance(value, str):
            return value.strip().lower()
        return value
