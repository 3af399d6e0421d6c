"""Order data models.

Order details are produced by the simulated order lookup and consumed
immediately by the total computation. The request/response models describe
the HTTP surface.
"""

from typing import Annotated

from pydantic import BaseModel, Field

# Order numbers and prices are unsigned 64-bit integers
U64_MAX = 2**64 - 1

OrderNumber = Annotated[int, Field(ge=0, le=U64_MAX)]


class OrderDetails(BaseModel):
    """Details of a single order."""

    order_number: OrderNumber = Field(..., description="Order identifier")
    price: int = Field(..., description="Order price", ge=0, le=U64_MAX)


class TotalPriceRequest(BaseModel):
    """Request model for computing the total price of a list of orders."""

    order_numbers: list[OrderNumber] = Field(
        default_factory=list, description="Order identifiers, processed in order"
    )


class TotalPriceResponse(BaseModel):
    """Response model for a computed total."""

    total: int = Field(..., description="Sum of all order prices", ge=0)


class ErrorResponse(BaseModel):
    """Response model for a failed lookup."""

    detail: str
