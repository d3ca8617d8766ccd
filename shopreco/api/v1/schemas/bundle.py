# api/v1/schemas/bundle.py
from typing import List, Optional

from pydantic import BaseModel, Field

from shopreco.domain.models.bundle import Bundle


class BundleCreateIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    main_product_id: str = Field(min_length=1)
    related_product_ids: List[str] = Field(min_length=1)
    discount_percentage: Optional[float] = Field(None, gt=0, lt=100)


class BundleListOut(BaseModel):
    bundles: List[Bundle]
    count: int
