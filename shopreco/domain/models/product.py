from pydantic import BaseModel, Field, TypeAdapter
from typing import Optional, List, Dict, Literal
from datetime import datetime

Category = Literal[
    "electronics", "clothing", "furniture", "books", "toys",
    "beauty", "sports", "food", "other",
]

class ProductImage(BaseModel):
    url: str
    alt: str = ""
    model_config = {"frozen": True}

class Product(BaseModel):
    product_id: str
    name: str
    slug: str
    description: str = ""
    price: float = Field(ge=0)
    category: Category
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    stock: int = Field(default=0, ge=0)
    images: List[ProductImage] = []
    tags: List[str] = []
    features: List[str] = []
    specifications: Dict[str, str] = {}
    rating: float = Field(default=0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    is_featured: bool = False
    is_published: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}

# Cache codec for product lists
ProductList = TypeAdapter(List[Product])
