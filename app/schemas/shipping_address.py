from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class ShippingAddressCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=50, description="e.g. Home, Office")
    recipient: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=30)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    province: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    is_primary: bool = False


class ShippingAddressUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=50)
    recipient: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=30)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    province: Optional[str] = Field(None, min_length=1, max_length=100)
    postal_code: Optional[str] = Field(None, min_length=1, max_length=20)
    is_primary: Optional[bool] = None


class ShippingAddressResponse(BaseModel):
    id: int
    user_id: int
    label: str
    recipient: str
    phone: str
    address: str
    city: str
    province: str
    postal_code: str
    is_primary: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
