"""
Submission validation - Field constraints and canonicalisation.

Checks run in a fixed order and stop at the first failure, so the message
returned for a given input is deterministic. Messages are user-facing
(French, matching the public form).
"""

import re
import unicodedata
from dataclasses import dataclass

from .models import ApplicationSubmission, NormalizedApplication

ALLOWED_COUNTRIES = frozenset({"france", "belgique", "suisse", "indecis"})

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PROFESSION_MAX_LENGTH = 100
MESSAGE_MAX_LENGTH = 1000

NAME_ERROR = "Le nom doit contenir entre 2 et 100 caractères"
EMAIL_ERROR = "Email invalide"
PHONE_ERROR = "Numéro de téléphone invalide"
COUNTRY_ERROR = "Pays invalide"
PROFESSION_ERROR = "La profession doit contenir entre 2 et 100 caractères"
MESSAGE_ERROR = "Le message doit contenir entre 10 et 1000 caractères"


@dataclass(frozen=True)
class ValidationOutcome:
    """Either a normalized application or the first violated constraint."""

    application: NormalizedApplication | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def normalize_country(value: str) -> str:
    """
    Canonical form for a destination country.

    Decomposes to NFD, drops combining marks and case-folds, so that
    "Indécis", "INDECIS" and "indecis" compare equal. Surrounding
    whitespace is kept, so " France " is not a valid country.
    """
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def _length_between(value: str, low: int, high: int) -> bool:
    return low <= len(value) <= high


def validate_submission(submission: ApplicationSubmission) -> ValidationOutcome:
    """
    Validate and normalize a raw submission.

    Order: name, email, phone, country, profession, message. Missing fields
    are treated as empty strings.
    """
    name = (submission.name or "").strip()
    if not _length_between(name, 2, NAME_MAX_LENGTH):
        return ValidationOutcome(error=NAME_ERROR)

    email = (submission.email or "").strip().lower()
    if not email or len(email) > EMAIL_MAX_LENGTH or not _EMAIL_PATTERN.match(email):
        return ValidationOutcome(error=EMAIL_ERROR)

    phone = (submission.phone or "").strip()
    if not _length_between(phone, 8, 20):
        return ValidationOutcome(error=PHONE_ERROR)

    country = normalize_country(submission.destination_country or "")
    if country not in ALLOWED_COUNTRIES:
        return ValidationOutcome(error=COUNTRY_ERROR)

    profession = (submission.profession or "").strip()
    if not _length_between(profession, 2, PROFESSION_MAX_LENGTH):
        return ValidationOutcome(error=PROFESSION_ERROR)

    message = (submission.message or "").strip()
    if not _length_between(message, 10, MESSAGE_MAX_LENGTH):
        return ValidationOutcome(error=MESSAGE_ERROR)

    return ValidationOutcome(
        application=NormalizedApplication(
            name=name,
            email=email,
            phone=phone,
            destination_country=country,
            profession=profession,
            message=message,
        )
    )
