from typing import Any, Dict, List, Optional

from shopreco.domain.repositories.product_repo import PUBLISHED

TODDLER_TAGS = ["toddler", "baby", "infant"]
KIDS_TAGS = ["kids", "children"]
TEEN_TAGS = ["teen", "youth"]

FEMALE_CATEGORIES = ["beauty", "clothing"]
MALE_CATEGORIES = ["electronics", "sports"]
ADULT_DEFAULT_CATEGORIES = ["electronics", "clothing", "beauty"]


def _in(values: List[str]) -> Dict[str, Any]:
    return {"$in": list(values)}


def _gendered_categories(gender: Optional[str], default: List[str]) -> List[str]:
    if gender == "female":
        return FEMALE_CATEGORIES
    if gender == "male":
        return MALE_CATEGORIES
    return default


def age_filter(age: int, gender: Optional[str]) -> Dict[str, Any]:
    """
    Age bands:
      <=3  toys for toddlers
      <=12 toys for kids
      <=18 gendered categories with teen tags (non-female defaults to electronics/sports)
      else gendered categories; unknown gender gets electronics/clothing/beauty
    """
    filt: Dict[str, Any] = dict(PUBLISHED)
    if age <= 3:
        filt["category"] = "toys"
        filt["tags"] = _in(TODDLER_TAGS)
    elif age <= 12:
        filt["category"] = "toys"
        filt["tags"] = _in(KIDS_TAGS)
    elif age <= 18:
        filt["category"] = _in(FEMALE_CATEGORIES if gender == "female" else MALE_CATEGORIES)
        filt["tags"] = _in(TEEN_TAGS)
    else:
        filt["category"] = _in(_gendered_categories(gender, ADULT_DEFAULT_CATEGORIES))
    return filt


def age_fallback_filter(age: int, primary: Dict[str, Any]) -> Dict[str, Any]:
    """Same filter without the tag constraint (toys stay toys up to 12)."""
    filt = {k: v for k, v in primary.items() if k != "tags"}
    if age <= 12:
        filt["category"] = "toys"
    return filt


def occasion_filter(occasion: str, age: Optional[int], gender: Optional[str]) -> Dict[str, Any]:
    filt: Dict[str, Any] = dict(PUBLISHED)
    if occasion == "birthday":
        if age is not None and age <= 12:
            filt["category"] = "toys"
            filt["tags"] = _in(["toddler", "baby"] if age <= 3 else KIDS_TAGS)
        elif gender in ("female", "male"):
            filt["category"] = _in(_gendered_categories(gender, []))
        else:
            filt["is_featured"] = True
    elif occasion in ("wedding", "anniversary"):
        filt["category"] = _in(["furniture", "electronics"])
        filt["tags"] = _in(["gift", "premium", "luxury"])
    elif occasion in ("christmas", "holiday"):
        filt["is_featured"] = True
        filt["tags"] = _in(["gift", "holiday"])
    elif occasion == "graduation":
        filt["category"] = _in(["electronics", "books"])
        filt["tags"] = _in(["gift", "premium"])
    elif occasion == "valentine":
        if gender == "female":
            filt["category"] = _in(FEMALE_CATEGORIES)
        elif gender == "male":
            filt["category"] = _in(["electronics", "clothing"])
        else:
            filt["tags"] = _in(["gift", "romantic"])
    else:
        filt["is_featured"] = True
        filt["tags"] = _in(["gift"])
    return filt


def gift_filter(age: Optional[int], gender: Optional[str], occasion: Optional[str]) -> Dict[str, Any]:
    """
    Highly rated gift-tagged products, narrowed by what is known:
    gender picks categories, age <=12 switches to toys with age tags,
    an occasion adds its own tag.
    """
    filt: Dict[str, Any] = {**PUBLISHED, "rating": {"$gte": 4}}
    tags = ["gift"]
    if gender in ("female", "male"):
        filt["category"] = _in(_gendered_categories(gender, []))
    if age is not None and age <= 12:
        filt["category"] = "toys"
        tags = (TODDLER_TAGS if age <= 3 else KIDS_TAGS) + ["gift"]
    if occasion:
        tags.append(occasion)
    filt["tags"] = _in(tags)
    return filt


FEATURED: Dict[str, Any] = {**PUBLISHED, "is_featured": True}
