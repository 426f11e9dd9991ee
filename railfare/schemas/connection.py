from pydantic import BaseModel, Field
from typing import List


# ============ Connection Endpoint ============

class LegResponse(BaseModel):
    """Flattened leg of a connection"""
    depTime: str = Field(..., description="Departure time (ISO-8601, UTC)")
    arrTime: str = Field(..., description="Arrival time (ISO-8601, UTC)")
    depName: str = Field(..., description="Departure station name")
    destName: str = Field(..., description="Arrival station name")
    lineName: str = Field(..., description="Train type and number(s), e.g. 'EC 123'")


class ConnectionResponse(BaseModel):
    """Flattened connection with prices in both currencies"""
    id: int = Field(..., description="IPWS connection identifier")
    priceCzk: float = Field(..., description="Price in CZK, 2 decimals")
    priceEur: float = Field(..., description="Price in EUR, 2 decimals")
    transfers: int = Field(..., description="Number of changes (legs - 1)")
    legs: List[LegResponse] = Field(default_factory=list)


# ============ Error Response ============

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str = Field(..., description="Error message")
