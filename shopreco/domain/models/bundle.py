from pydantic import BaseModel, Field, TypeAdapter
from typing import Optional, List
from datetime import datetime

from shopreco.domain.models.product import ProductImage, Product

# Prefix of synthesized (never persisted) bundle ids
SYNTHETIC_BUNDLE_PREFIX = "bundle-"

class BundleProduct(BaseModel):
    """
    Snapshot of a product taken when the bundle is built.
    It may drift from the live product (price change, deletion); bundles
    keep displaying what was curated.
    """
    product_id: str
    name: str
    price: float = Field(ge=0)
    category: str
    images: List[ProductImage] = []

    @classmethod
    def snapshot(cls, product: Product) -> "BundleProduct":
        return cls(
            product_id=product.product_id,
            name=product.name,
            price=product.price,
            category=product.category,
            images=list(product.images),
        )

class Bundle(BaseModel):
    bundle_id: str
    name: str
    description: str = ""
    main_product: BundleProduct
    related_products: List[BundleProduct] = []
    individual_total: float
    bundle_price: float
    savings: float
    savings_percentage: float
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_synthetic(self) -> bool:
        return self.bundle_id.startswith(SYNTHETIC_BUNDLE_PREFIX)

BundleList = TypeAdapter(List[Bundle])
