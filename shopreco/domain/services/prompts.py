from shopreco.domain.services.constants import CATEGORIES, OCCASIONS


def system_prompt() -> str:
    return "You classify e-commerce shopping queries. Answer with exactly two lines and nothing else."


def classification_task(query: str) -> str:
    return (
        "Analyze this shopping query and extract the intent and data.\n"
        f'Query: "{query}"\n\n'
        "Possible intents:\n"
        "- compare: User wants to compare products\n"
        "- gift: User is looking for a gift\n"
        "- budget: User has a specific budget\n"
        "- category: User is browsing a category\n"
        "- age: User is shopping for a specific age group\n"
        "- occasion: User is shopping for a specific occasion\n"
        "- specs: User is asking about product specifications\n"
        "- search: General product search\n\n"
        "DATA fields (only those present in the query):\n"
        "- budget as a dollar amount, e.g. $50\n"
        "- age as 'N years old'\n"
        f"- category, one of: {', '.join(CATEGORIES)}\n"
        f"- occasion, one of: {', '.join(OCCASIONS)}\n"
        "- gender: male or female\n"
        "- products to compare, separated by ' vs '\n\n"
        "Format your response as:\n"
        "Intent: [intent]\n"
        "Data: [extracted data like budget amount, category, age, etc.]"
    )
