"""
Parse labeled fields (Thought, Action, Observation, Answer) out of model text.

The transcript usually contains few-shot examples that reuse the same labels,
so fields are read right to left: the last occurrence of each label wins and
every match shrinks the window for the labels before it.
"""

FIELDS: tuple[str, ...] = ("Thought", "Action", "Observation", "Answer")


def parse(text: str) -> dict[str, str]:
    """
    Return {field.lower(): value} for the latest instance of each field.

    Text without an "Answer:" label yields {}. A value is the rest of the line
    after its label, stripped.
    """
    anchor = f"{FIELDS[-1]}:"
    if not text or anchor not in text:
        return {}

    parts: dict[str, str] = {}
    window = text
    for name in reversed(FIELDS):
        label = f"{name}:"
        pos = window.rfind(label)
        if pos < 0:
            continue
        rest = window[pos + len(label):]
        parts[name.lower()] = rest.split("\n", 1)[0].strip()
        window = window[:pos]
    return parts


def last_value(text: str, name: str) -> str | None:
    """Single-line value after the last "<name>:" in text, or None when the label is absent."""
    label = f"{name}:"
    pos = (text or "").rfind(label)
    if pos < 0:
        return None
    return text[pos + len(label):].split("\n", 1)[0].strip()
