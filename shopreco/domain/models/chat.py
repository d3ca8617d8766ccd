from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Literal
from datetime import datetime, timezone

from shopreco.domain.models.product import Product

ResponseType = Literal["text", "product_list", "comparison", "specs"]

class ExtractedData(BaseModel):
    """Structured hints parsed from the classifier's `Data:` line. All optional."""
    budget: Optional[float] = None
    age: Optional[int] = None
    category: Optional[str] = None
    occasion: Optional[str] = None
    gender: Optional[str] = None
    products: List[str] = []
    keywords: List[str] = []

class Classification(BaseModel):
    query: str
    intent: str
    data: ExtractedData = Field(default_factory=ExtractedData)
    source: Literal["remote", "keyword"] = "keyword"

class Resolution(BaseModel):
    """Output of the recommendation resolver, before the intent is attached."""
    message: str
    type: ResponseType = "text"
    products: List[Product] = []
    specification_keys: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None

class ChatResponse(BaseModel):
    intent: str
    message: str
    type: ResponseType
    products: List[Product] = []
    specification_keys: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None

class ChatQuery(BaseModel):
    """Append-only audit record, one per chatbot call."""
    user_id: Optional[str] = None
    query: str
    intent: str
    matched_products: List[str] = []
    response_type: ResponseType
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
