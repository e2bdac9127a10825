from .countries import COUNTRY_RULES, CountryRule, lookup, sepa_countries, supported_countries
from .errors import (
    BbanFormatMismatch,
    ChecksumFailure,
    IbanError,
    InternalArithmeticFailure,
    InvalidCharacters,
    LengthMismatch,
    MalformedHeader,
    UnsupportedCountry,
)
from .layout import CharClass, LayoutError, Segment, StructuralMatcher, compile_layout, parse_layout
from .iban import Iban, compute_check_digits, format_iban, is_valid_iban, mod97, normalize_iban, parse_iban
from .batch import ValidationResult, validate_many

__all__ = [
    "COUNTRY_RULES",
    "CountryRule",
    "lookup",
    "sepa_countries",
    "supported_countries",
    "IbanError",
    "InvalidCharacters",
    "MalformedHeader",
    "UnsupportedCountry",
    "LengthMismatch",
    "BbanFormatMismatch",
    "ChecksumFailure",
    "InternalArithmeticFailure",
    "CharClass",
    "LayoutError",
    "Segment",
    "StructuralMatcher",
    "compile_layout",
    "parse_layout",
    "Iban",
    "parse_iban",
    "normalize_iban",
    "is_valid_iban",
    "format_iban",
    "mod97",
    "compute_check_digits",
    "ValidationResult",
    "validate_many",
]
