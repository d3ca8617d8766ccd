# shopreco/domain/services/classifier.py
from __future__ import annotations

import asyncio
import logging
import re
from time import monotonic as _now
from typing import Optional, Protocol, Tuple

from openai import AsyncOpenAI

from shopreco.domain.models.chat import Classification, ExtractedData
from shopreco.domain.services.constants import (
    ALL_INTENTS, OCCASIONS,
    INTENT_COMPARE, INTENT_GIFT, INTENT_BUDGET, INTENT_CATEGORY,
    INTENT_AGE, INTENT_OCCASION, INTENT_SPECS, INTENT_SEARCH,
)
from shopreco.domain.services.extraction import parse_extracted_data
from shopreco.domain.services.prompts import system_prompt, classification_task

logger = logging.getLogger(__name__)

_INTENT_LINE_RE = re.compile(r"Intent:\s*(\w+)", re.I)
_DATA_LINE_RE = re.compile(r"Data:\s*(.*?)(?:\n|$)", re.I)

_COMPARE_RE = re.compile(r"\b(?:compare|vs\.?|versus)\b", re.I)
_BUDGET_RE = re.compile(r"\b(?:under|below|less than)\b.*(?:\$|\bdollars?\b)", re.I)
_AGE_RE = re.compile(r"\b(?:years?|yrs?|age|aged|old)\b", re.I)


class Classifier(Protocol):
    async def classify(self, query: str) -> Classification: ...


class KeywordClassifier:
    """Deterministic keyword matcher. Never fails; unmatched text is a `search`."""

    @staticmethod
    def detect_intent(query: str) -> str:
        q = query.lower()
        if _COMPARE_RE.search(q):
            return INTENT_COMPARE
        if "gift" in q or "present" in q or "recommendation" in q:
            return INTENT_GIFT
        if _BUDGET_RE.search(q):
            return INTENT_BUDGET
        if "category" in q or "show me" in q:
            return INTENT_CATEGORY
        if _AGE_RE.search(q):
            return INTENT_AGE
        if any(o in q for o in OCCASIONS):
            return INTENT_OCCASION
        if "spec" in q or "feature" in q or "detail" in q:
            return INTENT_SPECS
        return INTENT_SEARCH

    async def classify(self, query: str) -> Classification:
        return Classification(query=query, intent=self.detect_intent(query), source="keyword")


def parse_classifier_output(text: str) -> Tuple[Optional[str], ExtractedData]:
    """
    Read the `Intent:` and `Data:` lines of a completion.
    Intent is None when missing or not a known intent.
    """
    intent_m = _INTENT_LINE_RE.search(text or "")
    data_m = _DATA_LINE_RE.search(text or "")
    intent = intent_m.group(1).lower() if intent_m else None
    if intent not in ALL_INTENTS:
        intent = None
    data = parse_extracted_data(data_m.group(1)) if data_m else ExtractedData()
    return intent, data


class RemoteClassifier:
    """
    Text-generation classifier (OpenAI chat completions).
    Errors propagate; wrap in FallbackClassifier for production use.
    """

    def __init__(self, client: AsyncOpenAI, *, model: str, timeout_s: float = 5.0, max_tokens: int = 100):
        self.client = client
        self.model = model
        self.timeout_s = timeout_s
        self.max_tokens = max_tokens

    async def _complete(self, query: str) -> str:
        t0 = _now()
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt()},
                {"role": "user", "content": classification_task(query)},
            ],
            max_tokens=self.max_tokens,
            temperature=0.2,
            timeout=self.timeout_s,
        )
        logger.info("classifier call model=%s duration=%.3fs", getattr(resp, "model", self.model), _now() - t0)
        return resp.choices[0].message.content or ""

    async def classify(self, query: str) -> Classification:
        text = await self._complete(query)
        logger.debug("classifier raw output=%r", text[:300])
        intent, data = parse_classifier_output(text)
        if intent is None:
            intent = KeywordClassifier.detect_intent(query)
            logger.info("classifier output without usable intent; keyword intent=%s", intent)
        return Classification(query=query, intent=intent, data=data, source="remote")


class FallbackClassifier:
    """Try `primary` within `timeout_s`; on any error or timeout use `fallback`."""

    def __init__(self, primary: Classifier, fallback: Classifier, *, timeout_s: float = 5.0):
        self.primary = primary
        self.fallback = fallback
        self.timeout_s = timeout_s

    async def classify(self, query: str) -> Classification:
        try:
            return await asyncio.wait_for(self.primary.classify(query), timeout=self.timeout_s)
        except Exception as e:
            logger.warning("primary classifier failed, using fallback: %r", e)
            return await self.fallback.classify(query)


def build_classifier(api_key: str, *, model: str, timeout_s: float, max_tokens: int) -> Classifier:
    """Remote classifier with keyword fallback when an API key is configured, keyword-only otherwise."""
    keyword = KeywordClassifier()
    if not api_key:
        logger.info("No OPENAI_API_KEY configured, using keyword classifier only")
        return keyword
    remote = RemoteClassifier(
        AsyncOpenAI(api_key=api_key),
        model=model,
        timeout_s=timeout_s,
        max_tokens=max_tokens,
    )
    return FallbackClassifier(remote, keyword, timeout_s=timeout_s)
