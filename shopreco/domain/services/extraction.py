# shopreco/domain/services/extraction.py
"""
Parameter extraction for shopping queries.

Every `extract_*` helper takes the raw query and the classifier's
structured hints. The hint wins when usable; otherwise the value is
re-derived from the raw query, since the hints come from loosely parsed
model output and are often empty.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from shopreco.domain.models.chat import ExtractedData
from shopreco.domain.services.constants import (
    CATEGORIES, OCCASIONS, MALE_WORDS, FEMALE_WORDS,
    SPECS_STOPWORDS, SEARCH_STOPWORDS, SPECS_MIN_TOKEN_LEN, SEARCH_MIN_TOKEN_LEN,
)

_NUM = r"(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
_CURRENCY_RE = re.compile(rf"\$\s*{_NUM}|{_NUM}\s*(?:dollars?|usd|bucks)\b", re.I)
_BUDGET_QUERY_RE = re.compile(rf"\b(?:under|below|less than|within|up to|max(?:imum)?|budget(?: of)?)\s*\$?\s*{_NUM}", re.I)
_AGE_DATA_RE = re.compile(r"(\d+)[\s-]*(?:year|yr)s?", re.I)
_AGE_QUERY_RE = re.compile(r"(\d+)[\s-]*(?:year|yr)s?[\s-]*old", re.I)
_COMPARE_HINT_RE = re.compile(r"\b(?:vs\.?|versus|compare)\b", re.I)
_COMPARE_PREFIX_RE = re.compile(r"^.*?\bcompare\b\s*", re.I)
_COMPARE_SPLIT_RE = re.compile(r"\s+(?:vs\.?|versus|and|with|or)\s+", re.I)
_FIELD_BREAK_RE = re.compile(r"[,;]")
_TOKEN_RE = re.compile(r"[A-Za-z0-9][\w'.-]*")

_MALE_RE = re.compile(r"\b(?:" + "|".join(MALE_WORDS) + r")\b", re.I)
_FEMALE_RE = re.compile(r"\b(?:" + "|".join(FEMALE_WORDS) + r")\b", re.I)


def _first_in(text: str, vocabulary: Iterable[str]) -> Optional[str]:
    lowered = text.lower()
    for word in vocabulary:
        if word in lowered:
            return word
    return None


def _number(m: Optional[re.Match]) -> Optional[float]:
    if not m:
        return None
    raw = next((g for g in m.groups() if g), None)
    return float(raw.replace(",", "")) if raw is not None else None


def _gender_in(text: str) -> Optional[str]:
    if _MALE_RE.search(text):
        return "male"
    if _FEMALE_RE.search(text):
        return "female"
    return None


def split_compare_targets(text: str) -> List[str]:
    """
    'iPhone 13 Pro vs Samsung Galaxy S21' -> ['iPhone 13 Pro', 'Samsung Galaxy S21'].
    Returns [] unless at least two names are found.
    """
    if not _COMPARE_HINT_RE.search(text):
        return []
    body = _COMPARE_PREFIX_RE.sub("", text.strip())
    names = [p.strip(" \t?!.,;:'\"") for p in _COMPARE_SPLIT_RE.split(body)]
    names = [n for n in names if n]
    return names if len(names) >= 2 else []


def _compare_targets_in_data(data_text: str) -> List[str]:
    # other fields follow the names: "A vs B, category electronics"
    names = [_FIELD_BREAK_RE.split(n, 1)[0].strip() for n in split_compare_targets(data_text)]
    names = [n for n in names if n]
    return names if len(names) >= 2 else []


def parse_extracted_data(data_text: str) -> ExtractedData:
    """Heuristic parse of the classifier's free-text `Data:` line."""
    age_m = _AGE_DATA_RE.search(data_text)
    return ExtractedData(
        budget=_number(_CURRENCY_RE.search(data_text)),
        age=int(age_m.group(1)) if age_m else None,
        category=_first_in(data_text, CATEGORIES),
        occasion=_first_in(data_text, OCCASIONS),
        gender=_gender_in(data_text),
        products=_compare_targets_in_data(data_text),
    )


def extract_budget(query: str, data: ExtractedData) -> Optional[float]:
    if data.budget:
        return float(data.budget)
    return _number(_BUDGET_QUERY_RE.search(query)) or _number(_CURRENCY_RE.search(query))


def extract_age(query: str, data: ExtractedData) -> Optional[int]:
    if data.age is not None:
        return int(data.age)
    m = _AGE_QUERY_RE.search(query)
    return int(m.group(1)) if m else None


def extract_category(query: str, data: ExtractedData) -> Optional[str]:
    if data.category and data.category.lower() in CATEGORIES:
        return data.category.lower()
    return _first_in(query, CATEGORIES)


def extract_occasion(query: str, data: ExtractedData) -> Optional[str]:
    if data.occasion and data.occasion.lower() in OCCASIONS:
        return data.occasion.lower()
    return _first_in(query, OCCASIONS)


def extract_gender(query: str, data: ExtractedData) -> Optional[str]:
    if data.gender and data.gender.lower() in ("male", "female"):
        return data.gender.lower()
    return _gender_in(query)


def extract_products_to_compare(query: str, data: ExtractedData) -> List[str]:
    if len(data.products) >= 2:
        return list(data.products)
    return split_compare_targets(query)


def _tokens(query: str, min_len: int, stopwords: frozenset) -> List[str]:
    return [
        t for t in (m.group(0).strip(".'-") for m in _TOKEN_RE.finditer(query))
        if len(t) >= min_len and t.lower() not in stopwords
    ]


def extract_spec_keywords(query: str, data: ExtractedData) -> List[str]:
    if data.keywords:
        return list(data.keywords)
    return _tokens(query, SPECS_MIN_TOKEN_LEN, SPECS_STOPWORDS)


def extract_search_terms(query: str) -> str:
    return " ".join(_tokens(query, SEARCH_MIN_TOKEN_LEN, SEARCH_STOPWORDS))
