from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class CountryRule:
    """Per-country IBAN layout.

    ``format`` is the BBAN descriptor, e.g. ``U04F06F08`` = 4 upper letters,
    6 digits, 8 digits. Repeat counts always sum to ``length - 4``.
    """

    country_code: str
    length: int
    format: str
    sepa: bool = False

    @property
    def bban_length(self) -> int:
        return self.length - 4


def _rule(country_code: str, length: int, fmt: str, sepa: bool) -> CountryRule:
    return CountryRule(country_code=country_code, length=length, format=fmt, sepa=sepa)


# Source: http://www.tbg5-finance.org/ registry extract
_RULES = [
    _rule("AD", 24, "F04F04A12", False),
    _rule("AE", 23, "F03F16", False),
    _rule("AL", 28, "F08A16", False),
    _rule("AT", 20, "F05F11", True),
    _rule("AZ", 28, "U04A20", False),
    _rule("BA", 20, "F03F03F08F02", False),
    _rule("BE", 16, "F03F07F02", True),
    _rule("BG", 22, "U04F04F02A08", True),
    _rule("BH", 22, "U04A14", False),
    _rule("BR", 29, "F08F05F10U01A01", False),
    _rule("CH", 21, "F05A12", True),
    _rule("CR", 21, "F03F14", False),
    _rule("CY", 28, "F03F05A16", False),
    _rule("CZ", 24, "F04F06F10", True),
    _rule("DE", 22, "F08F10", True),
    _rule("DK", 18, "F04F09F01", True),
    _rule("DO", 28, "U04F20", False),
    _rule("EE", 20, "F02F02F11F01", True),
    _rule("ES", 24, "F04F04F01F01F10", True),
    _rule("FI", 18, "F06F07F01", True),
    _rule("FO", 18, "F04F09F01", True),
    _rule("FR", 27, "F05F05A11F02", True),
    _rule("GB", 22, "U04F06F08", True),
    _rule("GE", 22, "U02F16", False),
    _rule("GI", 23, "U04A15", True),
    _rule("GL", 18, "F04F09F01", True),
    _rule("GR", 27, "F03F04A16", True),
    _rule("GT", 28, "A04A20", False),
    _rule("HR", 21, "F07F10", False),
    _rule("HU", 28, "F03F04F01F15F01", True),
    _rule("IE", 22, "U04F06F08", True),
    _rule("IL", 23, "F03F03F13", False),
    _rule("IS", 26, "F04F02F06F10", True),
    _rule("IT", 27, "U01F05F05A12", True),
    _rule("JO", 30, "U04F04A18", False),
    _rule("KW", 30, "U04A22", False),
    _rule("KZ", 20, "F03A13", False),
    _rule("LB", 28, "F04A20", False),
    _rule("LC", 32, "U04A24", False),
    _rule("LI", 21, "F05A12", True),
    _rule("LT", 20, "F05F11", True),
    _rule("LU", 20, "F03A13", True),
    _rule("LV", 21, "U04A13", True),
    _rule("MC", 27, "F05F05A11F02", True),
    _rule("MD", 24, "A20", False),
    _rule("ME", 22, "F03F13F02", False),
    _rule("MK", 19, "F03A10F02", False),
    _rule("MR", 27, "F05F05F11F02", False),
    _rule("MT", 31, "U04F05A18", True),
    _rule("MU", 30, "U04F02F02F12F03U03", False),
    _rule("NL", 18, "U04F10", True),
    _rule("NO", 15, "F04F06F01", True),
    _rule("PK", 24, "U04A16", False),
    _rule("PL", 28, "F08F16", True),
    _rule("PS", 29, "U04A21", False),
    _rule("PT", 25, "F04F04F11F02", True),
    _rule("QA", 29, "U04A21", False),
    _rule("RO", 24, "U04A16", True),
    _rule("RS", 22, "F03F13F02", False),
    _rule("SA", 24, "F02A18", False),
    _rule("SC", 31, "U04F02F02F16U03", False),
    _rule("SE", 24, "F03F16F01", True),
    _rule("SI", 19, "F05F08F02", True),
    _rule("SK", 24, "F04F06F10", True),
    _rule("SM", 27, "U01F05F05A12", True),
    _rule("ST", 25, "F08F11F02", False),
    _rule("TL", 23, "F03F14F02", False),
    _rule("TN", 24, "F02F03F13F02", False),
    _rule("TR", 26, "F05A01A16", False),
    _rule("UA", 29, "F06A19", False),
    _rule("VG", 24, "U04F16", False),
    _rule("XK", 20, "F04F10F02", False),
]

COUNTRY_RULES: Mapping[str, CountryRule] = MappingProxyType({r.country_code: r for r in _RULES})


def lookup(country_code: str) -> Optional[CountryRule]:
    """Vrátí pravidlo pro zemi, nebo None pokud země IBAN nepoužívá (dle tabulky)."""
    return COUNTRY_RULES.get(country_code)


def supported_countries() -> list[str]:
    return sorted(COUNTRY_RULES)


def sepa_countries() -> list[str]:
    return sorted(cc for cc, r in COUNTRY_RULES.items() if r.sepa)
