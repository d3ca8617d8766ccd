import asyncio

import pytest

from fakes import ScriptedOpenAI
from shopreco.domain.models.chat import ExtractedData
from shopreco.domain.services.classifier import (
    FallbackClassifier, KeywordClassifier, RemoteClassifier, build_classifier, parse_classifier_output,
)
from shopreco.domain.services.extraction import (
    extract_age, extract_budget, extract_category, extract_gender, extract_occasion,
    extract_products_to_compare, extract_search_terms, extract_spec_keywords,
    parse_extracted_data, split_compare_targets,
)

EMPTY = ExtractedData()


@pytest.mark.parametrize("query,intent", [
    ("iPhone 13 Pro vs Samsung Galaxy S21", "compare"),
    ("Can you compare these two laptops", "compare"),
    ("I need a birthday gift for a 5-year-old boy", "gift"),
    ("show me electronics under $50", "budget"),
    ("show me toys", "category"),
    ("something fun for a 10 year old", "age"),
    ("ideas for a wedding", "occasion"),
    ("tell me the specs of the pixel", "specs"),
    ("wireless headphones", "search"),
    ("", "search"),
])
def test_keyword_intents(query, intent):
    assert KeywordClassifier.detect_intent(query) == intent


def test_compare_targets_keep_original_case():
    assert split_compare_targets("iPhone 13 Pro vs Samsung Galaxy S21") == ["iPhone 13 Pro", "Samsung Galaxy S21"]
    assert split_compare_targets("compare Kindle versus Kobo?") == ["Kindle", "Kobo"]
    assert split_compare_targets("iPhone 13 Pro") == []


def test_extraction_falls_back_to_raw_query():
    query = "I need a birthday gift for a 5-year-old boy"
    assert extract_age(query, EMPTY) == 5
    assert extract_gender(query, EMPTY) == "male"
    assert extract_occasion(query, EMPTY) == "birthday"
    assert extract_budget("show me electronics under $50", EMPTY) == 50.0
    assert extract_category("show me electronics under $50", EMPTY) == "electronics"
    assert extract_products_to_compare("iPhone 13 Pro vs Samsung Galaxy S21", EMPTY) == [
        "iPhone 13 Pro", "Samsung Galaxy S21",
    ]


def test_structured_hints_win_when_usable():
    data = ExtractedData(budget=80, age=30, category="Books", occasion="graduation", gender="female",
                         products=["A", "B"], keywords=["kindle"])
    assert extract_budget("under $20", data) == 80.0
    assert extract_age("a 5 year old", data) == 30
    assert extract_category("toys", data) == "books"
    assert extract_occasion("wedding", data) == "graduation"
    assert extract_gender("for my son", data) == "female"
    assert extract_products_to_compare("X vs Y", data) == ["A", "B"]
    assert extract_spec_keywords("specs of the iPhone", data) == ["kindle"]


def test_unusable_hints_are_ignored():
    data = ExtractedData(category="gadgets", occasion="party", gender="unknown")
    assert extract_category("some toys please", data) == "toys"
    assert extract_occasion("christmas stuff", data) == "christmas"
    assert extract_gender("for my daughter", data) == "female"


def test_gender_words_are_whole_words():
    assert extract_gender("something for a female friend", EMPTY) == "female"
    assert extract_gender("this is thin", EMPTY) is None


def test_keywords_and_search_terms():
    assert extract_spec_keywords("What are the specs of the iPhone 13 Pro?", EMPTY) == ["iPhone"]
    assert extract_search_terms("show me wireless headphones") == "wireless headphones"
    assert extract_search_terms("a b") == ""


def test_parse_data_line():
    data = parse_extracted_data("budget $100, age 5 years, category toys, occasion birthday, gender female")
    assert data.budget == 100.0
    assert data.age == 5
    assert data.category == "toys"
    assert data.occasion == "birthday"
    assert data.gender == "female"
    assert data.products == []


def test_parse_classifier_output():
    intent, data = parse_classifier_output("Intent: compare\nData: iPhone 13 Pro vs Samsung Galaxy S21")
    assert intent == "compare"
    assert data.products == ["iPhone 13 Pro", "Samsung Galaxy S21"]

    intent, data = parse_classifier_output("I think it is shopping")
    assert intent is None
    assert data == ExtractedData()

    assert parse_classifier_output("Intent: banana")[0] is None


@pytest.mark.asyncio
async def test_remote_classifier_parses_completion():
    client = ScriptedOpenAI("Intent: budget\nData: budget $40, category books")
    clf = RemoteClassifier(client, model="test-model", timeout_s=2, max_tokens=50)

    result = await clf.classify("cheap books")

    assert result.intent == "budget"
    assert result.source == "remote"
    assert result.data.budget == 40.0
    assert result.data.category == "books"
    req = client.requests[0]
    assert req["model"] == "test-model"
    assert req["max_tokens"] == 50
    assert "cheap books" in req["messages"][-1]["content"]


@pytest.mark.asyncio
async def test_remote_without_intent_uses_keyword_intent_and_keeps_data():
    clf = RemoteClassifier(ScriptedOpenAI("Data: age 7 years"), model="m")
    result = await clf.classify("a present for my nephew")
    assert result.intent == "gift"
    assert result.data.age == 7
    assert result.source == "remote"


@pytest.mark.asyncio
async def test_fallback_on_remote_error():
    remote = RemoteClassifier(ScriptedOpenAI(error=RuntimeError("503")), model="m")
    clf = FallbackClassifier(remote, KeywordClassifier(), timeout_s=1)

    result = await clf.classify("iPhone 13 Pro vs Samsung Galaxy S21")

    assert result.intent == "compare"
    assert result.source == "keyword"


@pytest.mark.asyncio
async def test_fallback_on_timeout():
    class Slow:
        async def classify(self, query):
            await asyncio.sleep(1)

    clf = FallbackClassifier(Slow(), KeywordClassifier(), timeout_s=0.01)
    result = await clf.classify("show me toys")
    assert result.intent == "category"
    assert result.source == "keyword"


def test_build_classifier_without_key_is_keyword_only():
    assert isinstance(build_classifier("", model="m", timeout_s=1, max_tokens=10), KeywordClassifier)
    assert isinstance(build_classifier("sk-test", model="m", timeout_s=1, max_tokens=10), FallbackClassifier)


def test_compare_names_stop_at_the_next_data_field():
    intent, data = parse_classifier_output(
        "Intent: compare\nData: iPhone 13 Pro vs Samsung Galaxy S21, category electronics"
    )
    assert intent == "compare"
    assert data.products == ["iPhone 13 Pro", "Samsung Galaxy S21"]
    assert data.category == "electronics"
    query = "iPhone 13 Pro vs Samsung Galaxy S21"
    assert extract_products_to_compare(query, data) == ["iPhone 13 Pro", "Samsung Galaxy S21"]


@pytest.mark.parametrize("query,budget", [
    ("laptops under $1,000", 1000.0),
    ("a sofa within $12,500.50", 12500.5),
    ("something for 2,000 dollars", 2000.0),
    ("under $50, please", 50.0),
])
def test_budget_with_thousands_separators(query, budget):
    assert extract_budget(query, EMPTY) == budget


def test_data_budget_with_thousands_separator():
    assert parse_extracted_data("budget $1,500, category furniture").budget == 1500.0
