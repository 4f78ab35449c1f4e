"""Keyword categorization and summary extraction for notices.

Both are deterministic string functions. Category rules are tried in order and
match anywhere in the lower-cased ``"{title} {content}"``, including inside
longer words.
"""
import re

CATEGORY_RULES: list[tuple[str, re.Pattern]] = [
    ("exams", re.compile(r"exam|test|quiz|assessment|midterm|final")),
    ("holidays", re.compile(r"holiday|vacation|break|off|closed")),
    ("sports", re.compile(r"sport|match|game|tournament|athletic")),
    ("events", re.compile(r"event|fest|celebration|ceremony|workshop|seminar|conference")),
    ("emergency", re.compile(r"urgent|emergency|immediate|critical|alert")),
]
DEFAULT_CATEGORY = "general"

SUMMARY_MAX_LENGTH = 150
_TAG_RE = re.compile(r"<[^>]*>")


def auto_categorize(title: str, content: str) -> str:
    text = f"{title} {content}".lower()
    for category, pattern in CATEGORY_RULES:
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY


def generate_summary(content: str) -> str:
    cleaned = _TAG_RE.sub("", content).strip()
    if len(cleaned) <= SUMMARY_MAX_LENGTH:
        return cleaned
    return cleaned[: SUMMARY_MAX_LENGTH - 3] + "..."
