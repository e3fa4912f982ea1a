"""Text helpers: slugs, reading time, excerpts."""

from __future__ import annotations

import math
import re
from html.parser import HTMLParser

from ..settings import READING_WORDS_PER_MINUTE

# Serbian Cyrillic -> Latin (Gaj's alphabet), then Latin diacritics -> ASCII.
_CYRILLIC_TO_LATIN = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "ђ": "đ", "е": "e", "ж": "ž",
    "з": "z", "и": "i", "ј": "j", "к": "k", "л": "l", "љ": "lj", "м": "m", "н": "n",
    "њ": "nj", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "ћ": "ć", "у": "u",
    "ф": "f", "х": "h", "ц": "c", "ч": "č", "џ": "dž", "ш": "š",
}
_LATIN_DIACRITICS = {"č": "c", "ć": "c", "đ": "d", "š": "s", "ž": "z"}


def transliterate(text: str) -> str:
    return "".join(_CYRILLIC_TO_LATIN.get(char, char) for char in text)


def generate_slug(title: str) -> str:
    """URL-safe slug from a Serbian title (Cyrillic or Latin)."""
    slug = transliterate(title.lower().strip())
    slug = "".join(_LATIN_DIACRITICS.get(char, char) for char in slug)
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def estimate_reading_time(content: str, words_per_minute: int = READING_WORDS_PER_MINUTE) -> int:
    """Minutes to read ``content``, never less than one."""
    words = len(content.split())
    return max(1, math.ceil(words / words_per_minute))


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


class _TextExtractor(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []

    def handle_data(self, data: str) -> None:
        self.parts.append(data)


def extract_plain_text(html: str) -> str:
    parser = _TextExtractor()
    parser.feed(html)
    parser.close()
    return "".join(parser.parts)

