"""Locale-aware number formatting for tables and exports.

The projection core returns raw floats; anything user-facing goes through a
FormatConfig passed in explicitly by the caller.
"""

from __future__ import annotations

from typing import Dict, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

CURRENCY_SYMBOLS: Dict[str, str] = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
}

# (group separator, decimal separator)
LOCALE_SEPARATORS: Dict[str, Tuple[str, str]] = {
    "en-GB": (",", "."),
    "el-GR": (".", ","),
}


class FormatConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    language: Literal["en", "el"] = "en"
    currency: str = "EUR"
    fractionDigits: int = Field(default=2, ge=0, le=6)

    @property
    def locale(self) -> str:
        return "el-GR" if self.language == "el" else "en-GB"

    @property
    def currency_symbol(self) -> str:
        return CURRENCY_SYMBOLS.get(self.currency.upper(), self.currency.upper())


def _localize(text: str, locale: str) -> str:
    group, decimal = LOCALE_SEPARATORS[locale]
    # swap through a placeholder so "," and "." do not collide
    return text.replace(",", "\0").replace(".", decimal).replace("\0", group)


def format_currency(value: float, config: FormatConfig) -> str:
    """Currency symbol always leads; a minus sign goes before the symbol."""
    digits = config.fractionDigits
    body = _localize(f"{abs(value):,.{digits}f}", config.locale)
    # no "-€0.00" for values that round to zero
    sign = "-" if value < 0 and round(abs(value), digits) != 0 else ""
    return f"{sign}{config.currency_symbol}{body}"


def format_decimal(value: float, config: FormatConfig, max_fraction_digits: int = 2) -> str:
    text = f"{value:,.{max_fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return _localize(text, config.locale)
