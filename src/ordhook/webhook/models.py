"""
Request and response models for the inscription webhook.
"""

from pydantic import BaseModel, ConfigDict, Field


class InscriptionRequest(BaseModel):
    """Body of a signed webhook call."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_url: str = Field(..., alias="fileUrl", min_length=1)
    fee_rate: float = Field(..., alias="feeRate", gt=0, allow_inf_nan=False)
    address: str = Field(..., min_length=1)


class WebhookResponse(BaseModel):
    """Body returned for accepted or failed webhook calls."""

    result: str
