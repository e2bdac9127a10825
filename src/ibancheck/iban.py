from __future__ import annotations

import logging
import string
from dataclasses import dataclass, field
from typing import List, Optional

from ibancheck.countries import CountryRule, lookup
from ibancheck.errors import (
    BbanFormatMismatch,
    ChecksumFailure,
    IbanError,
    InternalArithmeticFailure,
    InvalidCharacters,
    LengthMismatch,
    MalformedHeader,
    UnsupportedCountry,
)
from ibancheck.layout import compile_layout
from ibancheck.utils.logging_setup import log_event

log = logging.getLogger(__name__)

_INPUT_CHARS = frozenset(string.digits + string.ascii_letters)
_DIGITS = frozenset(string.digits)
_GROUP = 4


def normalize_iban(s: str) -> str:
    """Normalize IBAN-like string: remove spaces, upper-case.

    Only the plain space is stripped; tabs or newlines fail the character gate.
    """
    return (s or "").replace(" ", "").upper()


def _expand(rearranged: str) -> str:
    # A=10 .. Z=35, digits pass through
    out = []
    for ch in rearranged:
        if ch in _DIGITS:
            out.append(ch)
        elif "A" <= ch <= "Z":
            out.append(str(ord(ch) - 55))
        else:
            raise InternalArithmeticFailure(ch)
    return "".join(out)


def mod97(code: str) -> int:
    """ISO 7064 MOD 97-10 remainder of a normalized IBAN (valid codes give 1)."""
    num = _expand(code[4:] + code[:4])
    # mod 97 in chunks of 9 digits, keeps every intermediate small
    rem = 0
    for i in range(0, len(num), 9):
        rem = int(str(rem) + num[i : i + 9]) % 97
    return rem


def compute_check_digits(country_code: str, bban: str) -> str:
    """Check digits that make ``country_code + ?? + bban`` pass mod 97."""
    raw = country_code + "00" + bban
    _gate(raw)
    return f"{98 - mod97(normalize_iban(raw)):02d}"


def _gate(s: str) -> None:
    # positions index the caller's string, spaces included
    for i, ch in enumerate(s):
        if ch != " " and ch not in _INPUT_CHARS:
            raise InvalidCharacters(i, ch)


def _mask(s: str) -> str:
    compact = (s or "").replace(" ", "")
    if len(compact) <= 8:
        return "*" * len(compact)
    return compact[:4] + "*" * (len(compact) - 8) + compact[-4:]


def _print_code(code: str) -> str:
    return " ".join(code[i : i + _GROUP] for i in range(0, len(code), _GROUP))


def _check_bban(bban: str, rule: CountryRule) -> Optional[BbanFormatMismatch]:
    pos = compile_layout(rule.format).first_mismatch(bban)
    if pos is None:
        return None
    return BbanFormatMismatch(rule.country_code, bban, rule.format, pos)


def _check_digits(code: str) -> Optional[ChecksumFailure]:
    rem = mod97(code)
    if rem != 1:
        return ChecksumFailure(rem)
    return None


@dataclass(frozen=True)
class Iban:
    """Validated IBAN. Build it with :func:`parse_iban` / :meth:`Iban.parse`.

    Equality and hashing look at the normalized ``code`` only.
    """

    code: str
    country_code: str = field(compare=False)
    check_digits: str = field(compare=False)
    bban: str = field(compare=False)
    rule: CountryRule = field(compare=False, repr=False)
    raw: str = field(default="", compare=False, repr=False)
    print_code: str = field(default="", compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.print_code:
            object.__setattr__(self, "print_code", _print_code(self.code))

    @classmethod
    def parse(cls, s: str) -> "Iban":
        return parse_iban(s)

    @classmethod
    def from_bban(cls, country_code: str, bban: str) -> "Iban":
        """Build an IBAN from country code and BBAN, computing the check digits."""
        cc = normalize_iban(country_code)
        return parse_iban(cc + compute_check_digits(cc, bban) + normalize_iban(bban))

    @property
    def length(self) -> int:
        return self.rule.length

    @property
    def sepa(self) -> bool:
        return self.rule.sepa

    def display_format(self) -> str:
        return self.print_code

    def validate(self) -> List[IbanError]:
        """Re-run BBAN layout and checksum checks; both always run, all failures returned."""
        errors: List[IbanError] = []
        bban_err = _check_bban(self.bban, self.rule)
        if bban_err is not None:
            errors.append(bban_err)
        try:
            sum_err: Optional[IbanError] = _check_digits(self.code)
        except InternalArithmeticFailure as e:
            sum_err = e
        if sum_err is not None:
            errors.append(sum_err)
        return errors

    def __str__(self) -> str:
        return self.code


def _reject(err: IbanError, raw: str) -> IbanError:
    # account numbers never reach the logs in clear
    details = {k: v for k, v in err.payload.items() if k != "bban"}
    log_event(log, f"iban.reject.{err.code}", "IBAN rejected", level=logging.DEBUG, raw=_mask(raw), **details)
    return err


def parse_iban(s: str) -> Iban:
    """Normalize and fully validate ``s``; raises an :class:`IbanError` subclass on failure.

    Checks run cheapest first: characters, header, country, length, BBAN layout, mod 97.
    """
    if s is not None and not isinstance(s, str):
        raise TypeError(f"IBAN must be a string, not {type(s).__name__}")
    raw = s

    # ASCII alphanumerics only, checked before case folding
    try:
        _gate(s or "")
    except InvalidCharacters as e:
        raise _reject(e, raw) from None
    code = normalize_iban(s)

    header = code[:4]
    if len(header) < 4 or header[0] in _DIGITS or header[1] in _DIGITS or not (header[2] in _DIGITS and header[3] in _DIGITS):
        raise _reject(MalformedHeader(header), raw)

    country_code = header[:2]
    rule = lookup(country_code)
    if rule is None:
        raise _reject(UnsupportedCountry(country_code), raw)

    if len(code) != rule.length:
        raise _reject(LengthMismatch(country_code, rule.length, len(code)), raw)

    err: Optional[IbanError] = _check_bban(code[4:], rule)
    if err is None:
        err = _check_digits(code)
    if err is not None:
        raise _reject(err, raw)

    return Iban(
        code=code,
        country_code=country_code,
        check_digits=header[2:4],
        bban=code[4:],
        rule=rule,
        raw=raw,
    )


def is_valid_iban(iban: str) -> bool:
    """Offline IBAN validation (ISO 13616 layout + mod-97); never raises."""
    try:
        parse_iban(iban)
    except IbanError:
        return False
    return True


def format_iban(s: str) -> str:
    return parse_iban(s).print_code
