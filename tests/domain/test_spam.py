"""Tests for the keyword spam heuristic."""

import pytest

from pressctl.domain.spam import DEFAULT_SPAM_KEYWORDS, find_spam_keyword


class TestSpam:
    def test_default_keywords(self) -> None:
        assert set(DEFAULT_SPAM_KEYWORDS) == {
            "casino",
            "lottery",
            "winner",
            "bitcoin",
            "crypto",
            "click-here",
            "buy-now",
            "limited-time",
            "act-now",
        }

    @pytest.mark.parametrize(
        "body",
        ["Buy bitcoin now!!!", "CASINO night", "You are a Winner", "click-here for more"],
    )
    def test_detects_case_insensitively(self, body: str) -> None:
        assert find_spam_keyword(body) is not None

    def test_substring_match(self) -> None:
        assert find_spam_keyword("cryptography is fun") == "crypto"

    def test_clean_body(self) -> None:
        assert find_spam_keyword("Thanks for the thoughtful write-up") is None

    def test_blank_is_not_spam(self) -> None:
        assert find_spam_keyword(None) is None
        assert find_spam_keyword("   ") is None

    def test_custom_keywords(self) -> None:
        assert find_spam_keyword("cheap pills", ["pills"]) == "pills"
        assert find_spam_keyword("Buy bitcoin now", ["pills"]) is None
