# shopreco/domain/services/composer.py
from __future__ import annotations

from typing import Dict, List, Optional

from shopreco.domain.models.chat import ChatResponse, Resolution
from shopreco.domain.models.product import Product
from shopreco.domain.services.constants import (
    RESPONSE_TEXT, RESPONSE_PRODUCT_LIST, RESPONSE_COMPARISON, RESPONSE_SPECS,
)


def text_reply(message: str) -> Resolution:
    return Resolution(message=message, type=RESPONSE_TEXT)


def product_list(message: str, products: List[Product]) -> Resolution:
    return Resolution(message=message, type=RESPONSE_PRODUCT_LIST, products=products)


def comparison(products: List[Product]) -> Resolution:
    """
    Union of specification keys across the compared products, first-seen order.
    A product lacking a key is shown as missing that row.
    """
    keys: Dict[str, None] = {}
    for p in products:
        for k in p.specifications:
            keys.setdefault(k, None)
    names = " and ".join(p.name for p in products)
    return Resolution(
        message=f"Here's a comparison of {names}:",
        type=RESPONSE_COMPARISON,
        products=products,
        specification_keys=list(keys),
    )


def specs_sheet(product: Product) -> Resolution:
    return Resolution(
        message=f"Here are the specifications for {product.name}:",
        type=RESPONSE_SPECS,
        products=[product],
        specifications=dict(product.specifications),
    )


def money(amount: float) -> str:
    return f"${amount:g}"


def audience(age: Optional[int], gender: Optional[str]) -> str:
    """' for a 5-year-old male' style suffix; empty when nothing is known."""
    text = ""
    if age is not None:
        text += f" for a {age}-year-old"
    if gender:
        text += f" {gender}"
    return text


def compose(intent: str, resolution: Resolution) -> ChatResponse:
    """Reply envelope returned to the calling surface."""
    return ChatResponse(intent=intent, **resolution.model_dump(exclude={"products"}), products=resolution.products)
