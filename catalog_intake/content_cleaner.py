"""
Description cleaning: HTML product copy -> short plain text.

Bullet lists (<li> items) are preferred and joined with " | ". Otherwise all
tags are stripped, common entities decoded, whitespace collapsed, and trailing
store boilerplate (shipping, returns, copyright...) cut off.
"""

from __future__ import annotations

import re
from typing import Any

from catalog_intake.config import DEFAULT_CONFIG, PipelineConfig
from catalog_intake.value_parser import cell_text

_LIST_ITEM_RX = re.compile(r"<li[^>]*>(.*?)</li>", re.IGNORECASE | re.DOTALL)
_TAG_RX = re.compile(r"<[^>]+>")
_WHITESPACE_RX = re.compile(r"\s+")

_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#x27;", "'"),
    ("&nbsp;", " "),
)


def strip_tags(text: str, replacement: str = " ") -> str:
    return _TAG_RX.sub(replacement, text)


def decode_entities(text: str) -> str:
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RX.sub(" ", text).strip()


class ContentCleaner:
    """
    Cleans raw description cells.

    The boilerplate list and length limits come from PipelineConfig so they
    can be tuned without touching the cleaning logic.
    """

    def __init__(self, config: PipelineConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self._phrases = tuple(p.lower() for p in self.config.boilerplate_phrases)

    def extract_bullets(self, html: str) -> list[str]:
        """Return <li> texts whose length is strictly between the bullet limits."""
        bullets = []
        for fragment in _LIST_ITEM_RX.findall(html):
            text = collapse_whitespace(decode_entities(strip_tags(fragment, "")))
            if self.config.bullet_min_length < len(text) < self.config.bullet_max_length:
                bullets.append(text)
        return bullets

    def truncate_boilerplate(self, text: str) -> str:
        """Cut the text before the earliest boilerplate phrase starting past the offset."""
        lowered = text.lower()
        start = self.config.boilerplate_min_offset + 1
        cut = -1
        for phrase in self._phrases:
            idx = lowered.find(phrase, start)
            if idx >= 0 and (cut < 0 or idx < cut):
                cut = idx
        if cut < 0:
            return text
        return text[:cut].strip()

    def clean(self, value: Any) -> str:
        html = cell_text(value)
        if len(html) < self.config.clean_min_length:
            return html

        bullets = self.extract_bullets(html)
        if len(bullets) >= 2:
            joined = self.config.bullet_separator.join(bullets[: self.config.max_bullets])
            return joined[: self.config.description_max_length]

        text = collapse_whitespace(decode_entities(strip_tags(html)))
        text = self.truncate_boilerplate(text)
        return text[: self.config.description_max_length].strip()


def clean_description(value: Any, config: PipelineConfig | None = None) -> str:
    """Convenience wrapper around ContentCleaner.clean."""
    return ContentCleaner(config).clean(value)
