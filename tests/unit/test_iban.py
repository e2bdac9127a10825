from __future__ import annotations

import logging

import pytest

from ibancheck.countries import lookup
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
from ibancheck.iban import (
    Iban,
    compute_check_digits,
    format_iban,
    is_valid_iban,
    mod97,
    normalize_iban,
    parse_iban,
)

VALID = [
    "GB82 WEST 1234 5698 7654 32",
    "DE89 3704 0044 0532 0130 00",
    "NO93 8601 1117 947",
    "LC55 HEMM 0001 0001 0012 0012 0002 3015",
    "MU17 BOMM 0101 1010 3030 0200 000M UR",
    "FR14 2004 1010 0505 0001 3M02 606",
    "MT84 MALT 0110 0001 2345 MTLC AST0 01S",
    "BR18 0036 0305 0000 1000 9795 493C 1",
    "IT60 X054 2811 1010 0000 0123 456",
    "CH93 0076 2011 6238 5295 7",
    "AT61 1904 3002 3457 3201",
]


def test_parse_gb_vector() -> None:
    iban = parse_iban("GB82 WEST 1234 5698 7654 32")
    assert iban.code == "GB82WEST12345698765432"
    assert iban.print_code == "GB82 WEST 1234 5698 7654 32"
    assert iban.display_format() == iban.print_code
    assert iban.country_code == "GB"
    assert iban.check_digits == "82"
    assert iban.bban == "WEST12345698765432"
    assert iban.length == 22
    assert iban.sepa is True
    assert iban.rule is lookup("GB")
    assert iban.raw == "GB82 WEST 1234 5698 7654 32"
    assert str(iban) == "GB82WEST12345698765432"
    assert mod97(iban.code) == 1


@pytest.mark.parametrize("value", VALID)
def test_valid_vectors_round_trip(value: str) -> None:
    iban = parse_iban(value)
    assert iban.print_code.replace(" ", "") == iban.code
    assert iban.validate() == []
    again = parse_iban(iban.code)
    assert again == iban
    assert hash(again) == hash(iban)
    assert again.print_code == iban.print_code


def test_print_code_last_group_may_be_short() -> None:
    assert parse_iban("NO9386011117947").print_code == "NO93 8601 1117 947"
    assert parse_iban("CH9300762011623852957").print_code.split(" ")[-1] == "7"
    assert parse_iban("LC55HEMM000100010012001200023015").print_code.split(" ")[-1] == "3015"


def test_case_and_space_insensitive() -> None:
    a = parse_iban("gb82 west 1234 5698 7654 32")
    b = parse_iban("  GB82WEST12345698765432  ")
    assert a == b
    assert a.code == b.code
    assert a.raw != b.raw


def test_checksum_failure() -> None:
    with pytest.raises(ChecksumFailure) as exc:
        parse_iban("GB82 WEST 1234 5698 7654 33")
    assert exc.value.remainder == 28
    assert exc.value.to_dict()["code"] == "checksum_failure"


def test_unsupported_country() -> None:
    with pytest.raises(UnsupportedCountry) as exc:
        parse_iban("XX00 0000 0000")
    assert exc.value.country_code == "XX"
    assert exc.value.payload == {"country_code": "XX"}


def test_length_mismatch_reports_both_lengths() -> None:
    with pytest.raises(LengthMismatch) as exc:
        parse_iban("GB82WEST1234569876543")
    assert exc.value.expected == 22
    assert exc.value.actual == 21
    assert exc.value.country_code == "GB"
    assert "21" in str(exc.value) and "22" in str(exc.value)


def test_bban_format_mismatch() -> None:
    with pytest.raises(BbanFormatMismatch) as exc:
        parse_iban("GB82WE5T12345698765432")
    assert exc.value.country_code == "GB"
    assert exc.value.format == "U04F06F08"
    assert exc.value.bban == "WE5T12345698765432"
    assert exc.value.position == 2


@pytest.mark.parametrize(
    "value, position, character",
    [
        ("GB82-WEST-1234", 4, "-"),
        ("GB82\tWEST12345698765432", 4, "\t"),
        ("GB82WEßT12345698765432", 6, "ß"),
        ("GB82 WEST 1234 5698 7654 3é", 26, "é"),
        (" GB82 WE-T 1234", 8, "-"),
    ],
)
def test_invalid_characters(value: str, position: int, character: str) -> None:
    with pytest.raises(InvalidCharacters) as exc:
        parse_iban(value)
    assert exc.value.position == position
    assert exc.value.character == character
    # position indexes the caller's input, spaces included
    assert value[exc.value.position] == character


@pytest.mark.parametrize("value", ["", "   ", "G", "GB8", "1B82WEST12345698765432", "G182WEST", "GBX2WEST", "GB8XWEST"])
def test_malformed_header(value: str) -> None:
    with pytest.raises(MalformedHeader):
        parse_iban(value)


def test_checks_run_in_order() -> None:
    # bad characters win over a bad header
    with pytest.raises(InvalidCharacters):
        parse_iban("12-4")
    # unknown country wins over wrong length
    with pytest.raises(UnsupportedCountry):
        parse_iban("ZZ12")
    # wrong length wins over bad BBAN
    with pytest.raises(LengthMismatch):
        parse_iban("GB82WE5T")
    # bad BBAN wins over bad checksum
    with pytest.raises(BbanFormatMismatch):
        parse_iban("GB00WE5T12345698765432")


def test_all_errors_are_value_errors() -> None:
    for cls in (
        InvalidCharacters,
        MalformedHeader,
        UnsupportedCountry,
        LengthMismatch,
        BbanFormatMismatch,
        ChecksumFailure,
        InternalArithmeticFailure,
    ):
        assert issubclass(cls, IbanError)
        assert issubclass(cls, ValueError)


def test_is_valid_iban_never_raises() -> None:
    assert is_valid_iban("DE89 3704 0044 0532 0130 00") is True
    assert is_valid_iban("DE89 3704 0044 0532 0130 01") is False
    assert is_valid_iban("") is False
    assert is_valid_iban("not an iban") is False


def test_normalize_and_format() -> None:
    assert normalize_iban(" de89 3704 ") == "DE893704"
    assert normalize_iban(None) == ""  # type: ignore[arg-type]
    assert format_iban("de89370400440532013000") == "DE89 3704 0044 0532 0130 00"


def test_compute_check_digits() -> None:
    assert compute_check_digits("GB", "WEST12345698765432") == "82"
    assert compute_check_digits("DE", "370400440532013000") == "89"
    assert compute_check_digits("NO", "86011117947") == "93"
    assert compute_check_digits("gb", "west 1234 5698 7654 32") == "82"
    with pytest.raises(InvalidCharacters):
        compute_check_digits("GB", "WEST-1234")


@pytest.mark.parametrize(
    "country_code, bban",
    [
        ("NO", "86011117947"),
        ("LC", "HEMM000100010012001200023015"),
        ("MU", "BOMM0101101030300200000MUR"),
        ("SC", "SSCB11010000000000001497USD"),
    ],
)
def test_from_bban_builds_valid_iban(country_code: str, bban: str) -> None:
    iban = Iban.from_bban(country_code, bban)
    assert iban.country_code == country_code
    assert iban.bban == bban
    assert iban.length == len(iban.code)
    assert mod97(iban.code) == 1
    assert Iban.parse(iban.print_code) == iban


def test_from_bban_still_validates_layout() -> None:
    with pytest.raises(BbanFormatMismatch):
        Iban.from_bban("GB", "WE5T12345698765432")
    with pytest.raises(UnsupportedCountry):
        Iban.from_bban("XX", "1234")


def test_validate_returns_every_failure() -> None:
    rule = lookup("GB")
    assert rule is not None
    candidate = Iban(
        code="GB82WE5T12345698765432",
        country_code="GB",
        check_digits="82",
        bban="WE5T12345698765432",
        rule=rule,
    )
    errors = candidate.validate()
    assert [type(e) for e in errors] == [BbanFormatMismatch, ChecksumFailure]
    assert errors[0].position == 2
    assert errors[1].remainder == 52


def test_validate_only_checksum() -> None:
    rule = lookup("GB")
    candidate = Iban(code="GB00WEST12345698765432", country_code="GB", check_digits="00", bban="WEST12345698765432", rule=rule)
    errors = candidate.validate()
    assert len(errors) == 1
    assert isinstance(errors[0], ChecksumFailure)
    assert errors[0].remainder == 16


def test_validate_fails_closed_on_unexpandable_code() -> None:
    rule = lookup("GB")
    candidate = Iban(code="GB82WEST1234569876543!", country_code="GB", check_digits="82", bban="WEST1234569876543!", rule=rule)
    errors = candidate.validate()
    assert isinstance(errors[0], BbanFormatMismatch)
    assert isinstance(errors[1], InternalArithmeticFailure)
    assert errors[1].character == "!"


def test_mod97_rejects_non_alphanumeric() -> None:
    with pytest.raises(InternalArithmeticFailure):
        mod97("GB82WEST?")


def test_rejection_is_logged_at_debug(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="ibancheck")
    with pytest.raises(LengthMismatch):
        parse_iban("GB82WEST1234569876543")
    recs = [r for r in caplog.records if getattr(r, "event_name", "") == "iban.reject.length_mismatch"]
    assert len(recs) == 1
    assert recs[0].levelno == logging.DEBUG
    assert recs[0].extra_payload["expected"] == 22
    assert recs[0].extra_payload["actual"] == 21
    assert "GB82WEST1234569876543" not in caplog.text


def test_rejection_log_masks_account_number(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="ibancheck")
    with pytest.raises(BbanFormatMismatch):
        parse_iban("GB82 WE5T 1234 5698 7654 32")
    rec = next(r for r in caplog.records if getattr(r, "event_name", "") == "iban.reject.bban_format_mismatch")
    assert rec.extra_payload["raw"] == "GB82**************5432"
    assert "bban" not in rec.extra_payload
    assert rec.extra_payload["position"] == 2
    assert "12345698" not in caplog.text


def test_parse_rejects_non_string() -> None:
    with pytest.raises(TypeError):
        parse_iban(12345)  # type: ignore[arg-type]


def test_equality_uses_normalized_code_only() -> None:
    parsed = parse_iban("GB82 WEST 1234 5698 7654 32")
    hand_built = Iban(
        code="GB82WEST12345698765432",
        country_code="gb",
        check_digits="00",
        bban="",
        rule=lookup("DE"),
    )
    assert hand_built == parsed
    assert hash(hand_built) == hash(parsed)
    assert parsed != parse_iban("DE89370400440532013000")
