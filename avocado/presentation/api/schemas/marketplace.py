from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ItemCreateRequest(BaseModel):
    owner_id: Optional[int] = None
    title: str = ""
    description: str = ""
    category: str = ""
    item_type: str = ""
    price: float = Field(default=0, allow_inf_nan=False)
    condition: Optional[str] = None
    dorm_location: str = ""


class ItemCreateResponse(BaseModel):
    message: str = "Item created successfully"
    item_id: int


class ItemDeactivateRequest(BaseModel):
    item_id: int = 0


class ItemResponse(BaseModel):
    item_id: int
    owner_id: int
    seller_name: Optional[str]
    title: str
    description: str
    category: str
    item_type: str
    price: float
    condition: str
    dorm_location: str
    is_active: bool
    created_at: datetime


class ItemListResponse(BaseModel):
    items: List[ItemResponse]
    count: int
