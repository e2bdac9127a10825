from __future__ import annotations

from typing import Any, Dict


class IbanError(ValueError):
    """Base of all IBAN rejections. ``payload`` carries the structured details."""

    code = "iban_error"

    def __init__(self, message: str, **payload: Any):
        super().__init__(message)
        self.message = message
        self.payload: Dict[str, Any] = payload

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.payload}


class InvalidCharacters(IbanError):
    code = "invalid_characters"

    def __init__(self, position: int, character: str):
        super().__init__(
            f"IBAN can contain only alphanumeric characters (found {character!r} at position {position})",
            position=position,
            character=character,
        )
        self.position = position
        self.character = character


class MalformedHeader(IbanError):
    code = "malformed_header"

    def __init__(self, header: str):
        super().__init__(
            "IBAN must start with country code (2 characters) and check digits (2 digits)",
            header=header,
        )
        self.header = header


class UnsupportedCountry(IbanError):
    code = "unsupported_country"

    def __init__(self, country_code: str):
        super().__init__(f"Unsupported country code {country_code}", country_code=country_code)
        self.country_code = country_code


class LengthMismatch(IbanError):
    code = "length_mismatch"

    def __init__(self, country_code: str, expected: int, actual: int):
        super().__init__(
            f"IBAN length {actual} does not match length {expected} specified for country code {country_code}",
            country_code=country_code,
            expected=expected,
            actual=actual,
        )
        self.country_code = country_code
        self.expected = expected
        self.actual = actual


class BbanFormatMismatch(IbanError):
    code = "bban_format_mismatch"

    def __init__(self, country_code: str, bban: str, format: str, position: int | None = None):
        super().__init__(
            f"BBAN part of IBAN is not formatted according to country specification {format} for {country_code}",
            country_code=country_code,
            bban=bban,
            format=format,
            position=position,
        )
        self.country_code = country_code
        self.bban = bban
        self.format = format
        self.position = position


class ChecksumFailure(IbanError):
    code = "checksum_failure"

    def __init__(self, remainder: int):
        super().__init__(f"IBAN has incorrect check digits (mod 97 remainder {remainder}, expected 1)", remainder=remainder)
        self.remainder = remainder


class InternalArithmeticFailure(IbanError):
    # should be unreachable behind the character gate
    code = "internal_arithmetic_failure"

    def __init__(self, character: str):
        super().__init__("IBAN check digits validation failed", character=character)
        self.character = character
