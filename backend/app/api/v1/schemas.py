from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class PricePoint(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    source: str
    price: float
    in_stock: bool
    timestamp: datetime


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    prices: list[PricePoint] = Field(default_factory=list)


class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    product_name: str
    image_url: str = ""
    added_at: datetime
    last_checked_at: Optional[datetime] = None

    # 0 / "" / False when no source has been observed yet
    lowest_price: float = 0.0
    lowest_source: str = ""
    in_stock: bool = False


class AddProductRequest(BaseModel):
    user_id: int = Field(ge=0)
    product_name: str = Field(min_length=2)


class DeleteProductRequest(BaseModel):
    user_id: int = Field(ge=0)
    product_id: int = Field(ge=0)
