"""
Unit tests for the description ContentCleaner.
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from catalog_intake.config import PipelineConfig
from catalog_intake.content_cleaner import ContentCleaner, clean_description

BODY = "Premium steel water bottle keeps drinks cold for 24 hours. " * 3


class TestContentCleaner:
    def setup_method(self):
        self.cleaner = ContentCleaner()

    def test_short_input_returned_as_is(self):
        assert self.cleaner.clean("<b>x</b>") == "<b>x</b>"
        assert self.cleaner.clean("") == ""

    def test_bullets_preferred(self):
        html = (
            "<ul><li>Durable material and construction</li><li>Fits all standard mounts</li></ul>"
            "Shipping: 3-5 days. Copyright 2024."
        )
        assert self.cleaner.clean(html) == "Durable material and construction | Fits all standard mounts"

    def test_bullets_limited_to_six(self):
        html = "".join(f"<li>Feature number {i} here</li>" for i in range(10))
        result = self.cleaner.clean(html)
        assert result.count(" | ") == 5
        assert result.endswith("Feature number 5 here")

    def test_short_bullets_ignored(self):
        html = "<ul><li>Red</li><li>Blue</li></ul><p>A sturdy everyday bottle.</p>"
        assert self.cleaner.clean(html) == "Red Blue A sturdy everyday bottle."

    def test_tags_and_entities(self):
        assert self.cleaner.clean("<p>Great &amp; durable&nbsp;bottle</p>") == "Great & durable bottle"

    def test_boilerplate_after_offset_truncated(self):
        text = BODY + "Shipping is free. Returns within 30 days."
        assert self.cleaner.clean(text) == BODY.strip()

    def test_boilerplate_near_start_kept(self):
        text = "Free shipping included. " + BODY
        result = self.cleaner.clean(text)
        assert result.startswith("Free shipping included.")
        assert result.endswith("hours.")

    def test_max_length(self):
        result = self.cleaner.clean("word " * 300)
        assert len(result) <= 500

    def test_idempotent(self):
        samples = [
            "<p>Great &amp; durable bottle</p>",
            BODY + "Copyright 2024 Example Store",
            "<ul><li>Durable material and construction</li><li>Fits all standard mounts</li></ul>",
            "<ul><li>Durable steel &amp; silicone body</li><li>Fits all standard mounts</li></ul>",
        ]
        for sample in samples:
            once = self.cleaner.clean(sample)
            assert self.cleaner.clean(once) == once

    def test_bullet_entities_decoded(self):
        html = "<ul><li>Durable steel &amp; silicone body</li><li>Fits all&nbsp;standard mounts</li></ul>"
        assert self.cleaner.clean(html) == "Durable steel & silicone body | Fits all standard mounts"

    def test_custom_boilerplate(self):
        cleaner = ContentCleaner(PipelineConfig(boilerplate_phrases=("warranty",)))
        text = BODY + "Warranty: one year. Shipping is free."
        assert cleaner.clean(text) == BODY.strip()


def test_clean_description_wrapper():
    assert clean_description("<p>Great &amp; durable bottle</p>") == "Great & durable bottle"
