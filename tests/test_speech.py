"""Tests for spoken-number helpers."""

import pytest

from insights_mcp.utils.speech import format_number_for_speech, get_currency_word


class TestFormatNumberForSpeech:
    """Tests for format_number_for_speech."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, "0"),
            (850, "850"),
            (999.4, "999"),
            (4300, "4 thousand 300"),
            (7148, "7 thousand 100"),
            (5000, "5 thousand"),
            (9960, "10 thousand"),
            (45600, "46 thousand"),
            (2500000, "2.5 million"),
        ],
    )
    def test_format(self, value: float, expected: str) -> None:
        """Test numbers read the way a person would say them."""
        assert format_number_for_speech(value) == expected

    def test_negative_uses_magnitude(self) -> None:
        """Test the sign is left to the surrounding sentence."""
        assert format_number_for_speech(-4300) == "4 thousand 300"


class TestGetCurrencyWord:
    """Tests for get_currency_word."""

    def test_known_currencies(self) -> None:
        """Test known codes map to spoken words."""
        assert get_currency_word("SEK") == "kronor"
        assert get_currency_word("usd") == "dollars"
        assert get_currency_word("EUR") == "euros"

    def test_unknown_currency(self) -> None:
        """Test unknown codes are lowercased."""
        assert get_currency_word("ISK") == "isk"
