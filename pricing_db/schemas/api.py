"""
API Schemas
===========
Request/Response models for the HTTP API.
"""

from pydantic import BaseModel, Field


class TokenCostRequest(BaseModel):
    """Token usage to price."""

    model: str = Field(..., min_length=1, max_length=255)
    input_tokens: int = 0
    output_tokens: int = 0
    cached_tokens: int = 0
    batch_mode: bool = False


class GroundingCostRequest(BaseModel):
    model: str = Field(..., min_length=1, max_length=255)
    query_count: int = 0


class GroundingCostResponse(BaseModel):
    model: str
    query_count: int
    cost: float


class CreditCostRequest(BaseModel):
    provider: str = Field(..., min_length=1, max_length=255)
    multiplier: str = ""


class CreditCostResponse(BaseModel):
    provider: str
    multiplier: str
    credits: int


class ImageCostRequest(BaseModel):
    model: str = Field(..., min_length=1, max_length=255)
    image_count: int = 1


class ProvidersResponse(BaseModel):
    """Loaded providers in alphabetical order."""

    providers: list[str]
    model_count: int
    provider_count: int
