"""
Spam heuristics - Cheap anti-bot checks run before validation.

Checks, in order of cost and confidence:
1. Honeypot: a field hidden from humans must stay empty.
2. Timing: a human needs a few seconds between page render and submit.
3. Content: known spam keywords, two or more URLs, or markup injection.

The verdict names the heuristic that fired so it can be logged for tuning;
callers must not echo it back to the client.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from .models import ApplicationSubmission
from .ports import SpamVerdict
from .validation import (
    EMAIL_MAX_LENGTH,
    MESSAGE_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PROFESSION_MAX_LENGTH,
)

SUSPICIOUS_PATTERNS = (
    re.compile(r"viagra|cialis|casino|lottery|winner", re.IGNORECASE),
    re.compile(r"<script|javascript:|onclick|onerror", re.IGNORECASE),
)

# Two or more links in one submission is treated as link spam.
URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)
MAX_URLS = 1


@dataclass(frozen=True)
class SpamHeuristics:
    """Stateless evaluator for the anti-bot signals of a submission."""

    min_fill_time: timedelta = timedelta(seconds=3)

    def check(self, submission: ApplicationSubmission, now: datetime) -> SpamVerdict:
        if (submission.honeypot or "").strip():
            return SpamVerdict.HONEYPOT

        if submission.form_rendered_at is not None:
            if now - submission.form_rendered_at < self.min_fill_time:
                return SpamVerdict.TOO_FAST

        if self._has_suspicious_content(submission):
            return SpamVerdict.SUSPICIOUS_CONTENT

        return SpamVerdict.CLEAN

    @staticmethod
    def _has_suspicious_content(submission: ApplicationSubmission) -> bool:
        # Each field is scanned up to its accepted length; anything longer is
        # rejected by validation anyway.
        text = " ".join(
            [
                (submission.name or "").strip()[:NAME_MAX_LENGTH],
                (submission.email or "").strip().lower()[:EMAIL_MAX_LENGTH],
                (submission.message or "").strip()[:MESSAGE_MAX_LENGTH],
                (submission.profession or "").strip()[:PROFESSION_MAX_LENGTH],
            ]
        )
        if any(pattern.search(text) for pattern in SUSPICIOUS_PATTERNS):
            return True
        urls = URL_PATTERN.finditer(text)
        return sum(1 for _ in urls) > MAX_URLS
