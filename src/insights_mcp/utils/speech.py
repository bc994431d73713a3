"""Spoken-number helpers for audio scripts."""

import math

CURRENCY_WORDS: dict[str, str] = {
    "SEK": "kronor",
    "NOK": "kroner",
    "DKK": "kroner",
    "USD": "dollars",
    "CAD": "Canadian dollars",
    "AUD": "Australian dollars",
    "EUR": "euros",
    "GBP": "pounds",
    "CHF": "francs",
    "JPY": "yen",
    "PLN": "zloty",
}


def get_currency_word(currency: str) -> str:
    """Currency as a spoken word ("kronor", "dollars"); unknown codes are lowercased."""
    return CURRENCY_WORDS.get(currency.upper(), currency.lower())


def format_number_for_speech(value: float) -> str:
    """
    Format a number the way a person would say it.

    Examples:
        850 -> "850"
        4300 -> "4 thousand 300"
        45600 -> "46 thousand"
        2450000 -> "2.5 million"
    """
    rounded = int(math.floor(abs(value) + 0.5))

    if rounded < 1000:
        return str(rounded)

    if rounded < 10_000:
        thousands = rounded // 1000
        hundreds = int(math.floor((rounded % 1000) / 100 + 0.5)) * 100
        if hundreds >= 1000:
            return f"{thousands + 1} thousand"
        if hundreds > 0:
            return f"{thousands} thousand {hundreds}"
        return f"{thousands} thousand"

    if rounded < 1_000_000:
        return f"{int(math.floor(rounded / 1000 + 0.5))} thousand"

    return f"{rounded / 1_000_000:.1f} million"
