from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]

class OrderItem(BaseModel):
    product_id: str
    name: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)
    image: Optional[str] = None

class Order(BaseModel):
    """Past order. Read-only here: used for trending and co-purchase statistics."""
    order_id: str
    user_id: str
    items: List[OrderItem]
    status: OrderStatus = "pending"
    subtotal: float = Field(default=0, ge=0)
    total: float = Field(default=0, ge=0)
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}
