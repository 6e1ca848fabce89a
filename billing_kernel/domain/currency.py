"""
Currencies a document may be issued in.

Precision follows the minor unit the currency is invoiced in: the franc
currencies print whole amounts, the Gulf dinars three places, the rest two.
Document totals are always computed exactly and rounded to two places by
the totals engine; the minor unit here only governs ``Money.round()``.
"""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    decimal_places: int
    name: str


def _table(*entries: tuple[str, int, str]) -> dict[str, CurrencyInfo]:
    return {code: CurrencyInfo(code, places, name) for code, places, name in entries}


class CurrencyRegistry:
    """Lookup of the accepted currency codes."""

    # FRW is the code printed on local documents; RWF is its ISO 4217 twin
    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = _table(
        ("FRW", 0, "Rwandan Franc"),
        ("RWF", 0, "Rwandan Franc"),
        ("UGX", 0, "Ugandan Shilling"),
        ("BIF", 0, "Burundian Franc"),
        ("USD", 2, "US Dollar"),
        ("EUR", 2, "Euro"),
        ("GBP", 2, "Pound Sterling"),
        ("KES", 2, "Kenyan Shilling"),
        ("TZS", 2, "Tanzanian Shilling"),
        ("CDF", 2, "Congolese Franc"),
        ("LBP", 2, "Lebanese Pound"),
        ("SAR", 2, "Saudi Riyal"),
        ("AED", 2, "UAE Dirham"),
        ("KWD", 3, "Kuwaiti Dinar"),
        ("BHD", 3, "Bahraini Dinar"),
    )

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return code in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(code)

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls._CURRENCIES.get(code)
        return info.decimal_places if info else cls.DEFAULT_DECIMAL_PLACES

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
