"""
Unit tests for submission validation.

Tests verify:
- Each field constraint and its boundaries
- Fixed check order (first violation wins)
- Canonicalisation of email and destination country
"""

import pytest

from src.domain.validation import (
    COUNTRY_ERROR,
    EMAIL_ERROR,
    MESSAGE_ERROR,
    NAME_ERROR,
    PHONE_ERROR,
    PROFESSION_ERROR,
    normalize_country,
    validate_submission,
)
from tests.conftest import valid_submission


class TestValidSubmission:
    """Tests for the happy path."""

    def test_valid_submission_is_ok(self) -> None:
        outcome = validate_submission(valid_submission())

        assert outcome.ok
        assert outcome.error is None
        assert outcome.application is not None

    def test_fields_are_trimmed(self) -> None:
        outcome = validate_submission(
            valid_submission(
                name="  Jean Dupont  ",
                phone=" 0612345678 ",
                profession="  Infirmier ",
                message="   Un message assez long.   ",
            )
        )

        app = outcome.application
        assert app.name == "Jean Dupont"
        assert app.phone == "0612345678"
        assert app.profession == "Infirmier"
        assert app.message == "Un message assez long."


class TestNormalization:
    """Tests for canonical email and country."""

    def test_email_is_lowercased(self) -> None:
        outcome = validate_submission(valid_submission(email="  Jean@TEST.com "))
        assert outcome.application.email == "jean@test.com"

    @pytest.mark.parametrize("country", ["Suisse", "SUISSE", "suisse"])
    def test_country_case_variants(self, country: str) -> None:
        outcome = validate_submission(valid_submission(destination_country=country))
        assert outcome.application.destination_country == "suisse"

    @pytest.mark.parametrize("country", ["Indécis", "INDÉCIS", "indecis", "Indécis"])
    def test_country_accent_variants(self, country: str) -> None:
        outcome = validate_submission(valid_submission(destination_country=country))
        assert outcome.application.destination_country == "indecis"

    def test_normalize_country_strips_combining_marks(self) -> None:
        assert normalize_country("Bélgique") == "belgique"

    def test_normalization_is_idempotent(self) -> None:
        once = validate_submission(valid_submission(email="Jean@TEST.com")).application
        twice = validate_submission(
            valid_submission(email=once.email, destination_country=once.destination_country)
        ).application
        assert twice.email == once.email == "jean@test.com"
        assert twice.destination_country == once.destination_country == "france"


class TestFieldConstraints:
    """Tests for length and format boundaries."""

    @pytest.mark.parametrize(
        ("name", "ok"),
        [("J", False), ("Jo", True), ("x" * 100, True), ("x" * 101, False), ("   ", False)],
    )
    def test_name_length(self, name: str, ok: bool) -> None:
        outcome = validate_submission(valid_submission(name=name))
        assert outcome.ok is ok
        if not ok:
            assert outcome.error == NAME_ERROR

    @pytest.mark.parametrize(
        "email",
        ["plainaddress", "missing@tld", "@example.com", "two words@example.com", ""],
    )
    def test_email_format(self, email: str) -> None:
        assert validate_submission(valid_submission(email=email)).error == EMAIL_ERROR

    def test_email_too_long(self) -> None:
        email = "a" * 250 + "@x.com"
        assert validate_submission(valid_submission(email=email)).error == EMAIL_ERROR

    @pytest.mark.parametrize(
        ("phone", "ok"),
        [("1234567", False), ("12345678", True), ("1" * 20, True), ("1" * 21, False)],
    )
    def test_phone_length(self, phone: str, ok: bool) -> None:
        outcome = validate_submission(valid_submission(phone=phone))
        assert outcome.ok is ok
        if not ok:
            assert outcome.error == PHONE_ERROR

    @pytest.mark.parametrize("country", ["", "Espagne", "fr", " France ", "suisse\n", None])
    def test_country_not_allowed(self, country) -> None:
        outcome = validate_submission(valid_submission(destination_country=country))
        assert outcome.error == COUNTRY_ERROR

    def test_profession_too_short(self) -> None:
        outcome = validate_submission(valid_submission(profession="X"))
        assert outcome.error == PROFESSION_ERROR

    @pytest.mark.parametrize(
        ("message", "ok"),
        [("x" * 9, False), ("x" * 10, True), ("x" * 1000, True), ("x" * 1001, False)],
    )
    def test_message_length(self, message: str, ok: bool) -> None:
        outcome = validate_submission(valid_submission(message=message))
        assert outcome.ok is ok
        if not ok:
            assert outcome.error == MESSAGE_ERROR

    def test_missing_fields_treated_as_empty(self) -> None:
        outcome = validate_submission(valid_submission(message=None))
        assert outcome.error == MESSAGE_ERROR


class TestCheckOrder:
    """First violated constraint wins, in validator-defined order."""

    def test_name_reported_before_everything_else(self) -> None:
        outcome = validate_submission(
            valid_submission(name="", email="bad", phone="1", destination_country="x")
        )
        assert outcome.error == NAME_ERROR

    def test_email_reported_before_phone(self) -> None:
        outcome = validate_submission(valid_submission(email="bad", phone="1"))
        assert outcome.error == EMAIL_ERROR

    def test_country_reported_before_profession_and_message(self) -> None:
        outcome = validate_submission(
            valid_submission(destination_country="Mars", profession="", message="")
        )
        assert outcome.error == COUNTRY_ERROR

    def test_profession_reported_before_message(self) -> None:
        outcome = validate_submission(valid_submission(profession="", message=""))
        assert outcome.error == PROFESSION_ERROR

    def test_single_error_not_aggregate(self) -> None:
        outcome = validate_submission(valid_submission(name="", email="", message=""))
        assert outcome.application is None
        assert outcome.error == NAME_ERROR
