# Shopping intents
INTENT_COMPARE = "compare"    # side-by-side specification comparison
INTENT_GIFT = "gift"
INTENT_BUDGET = "budget"      # price ceiling
INTENT_CATEGORY = "category"
INTENT_AGE = "age"            # shopping for an age group
INTENT_OCCASION = "occasion"
INTENT_SPECS = "specs"        # specification sheet of one product
INTENT_SEARCH = "search"      # default

ALL_INTENTS = (
    INTENT_COMPARE, INTENT_GIFT, INTENT_BUDGET, INTENT_CATEGORY,
    INTENT_AGE, INTENT_OCCASION, INTENT_SPECS, INTENT_SEARCH,
)

# Reply types
RESPONSE_TEXT = "text"
RESPONSE_PRODUCT_LIST = "product_list"
RESPONSE_COMPARISON = "comparison"
RESPONSE_SPECS = "specs"

# Presentation caps
COMPARE_LIMIT = 4
RESULT_LIMIT = 6

# Vocabularies (first substring match wins, so order matters)
CATEGORIES = ("electronics", "clothing", "furniture", "books", "toys", "beauty", "sports", "food")
OCCASIONS = ("birthday", "wedding", "anniversary", "christmas", "graduation", "valentine", "holiday")

MALE_WORDS = ("male", "boy", "boys", "men", "man", "him", "his", "son", "husband", "boyfriend", "father", "dad", "brother")
FEMALE_WORDS = ("female", "girl", "girls", "women", "woman", "her", "daughter", "wife", "girlfriend", "mother", "mom", "sister")

# Words dropped before keyword/text search
SPECS_STOPWORDS = frozenset({"what", "tell", "about", "specs", "specifications", "features", "details", "does", "have", "with"})
SEARCH_STOPWORDS = frozenset({"show", "find", "get", "give", "want", "need", "looking", "search", "for", "the", "and", "some"})

SPECS_MIN_TOKEN_LEN = 4    # tokens longer than 3 chars
SEARCH_MIN_TOKEN_LEN = 3   # tokens longer than 2 chars

# Trending lookback windows (days)
TIMEFRAME_DAYS = {"day": 1, "week": 7, "month": 30}
DEFAULT_TIMEFRAME = "week"

# Synthetic bundle discount
BUNDLE_DISCOUNT = 0.10

# Recommendation kinds
RECO_RECOMMENDED = "recommended"
RECO_RECENTLY_VIEWED = "recently-viewed"
RECO_BOUGHT_TOGETHER = "frequently-bought-together"
RECO_SMART_COLLABORATIVE = "smart-collaborative"
RECO_SMART_ITEM = "smart-item-based"
RECO_SMART_TRENDING = "smart-trending"

ALL_RECO_KINDS = (
    RECO_RECOMMENDED, RECO_RECENTLY_VIEWED, RECO_BOUGHT_TOGETHER,
    RECO_SMART_COLLABORATIVE, RECO_SMART_ITEM, RECO_SMART_TRENDING,
)

MAX_RECENTLY_VIEWED_IDS = 50
