"""Prompt text for the answer step."""

SYSTEM_MESSAGE = (
    "You are a world-class data analyst, specialising in analysing comma-delimited CSV files.\n\n"
    "Your job is to analyse some CSV snippets and determine what the results are "
    "for the question that the user is asking.\n\n"
    "You should aim to be concise. If you don't know something, don't make it up "
    "but say 'I don't know.'."
)

CONTEXT_SEPARATOR = "Provided context:"


def build_user_message(query: str, context: str) -> str:
    """Question first, then the retrieved context under a separator line."""
    return f"{query}\n\n{CONTEXT_SEPARATOR}\n{context}"


def build_messages(query: str, context: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_MESSAGE},
        {"role": "user", "content": build_user_message(query, context)},
    ]
