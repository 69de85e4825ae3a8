"""
Unit tests for pure domain helpers: vote transitions, tag normalization,
invite expiry and the error envelope.
"""

from datetime import datetime, timedelta, timezone

import pytest

from stackteam.api.errors import make_error_envelope
from stackteam.core.exceptions import (
    AppError,
    Conflict,
    Expired,
    Forbidden,
    InvariantViolation,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from stackteam.models.team_invite import TeamInvite, ensure_aware
from stackteam.services.access import contains_pattern
from stackteam.services.tagging import normalize_tag_names
from stackteam.services.voting import vote_transition


class TestVoteTransition:
    @pytest.mark.parametrize(
        "current,requested,expected",
        [
            (None, "up", ("added", "up", 1)),
            (None, "down", ("added", "down", -1)),
            ("up", "up", ("removed", None, -1)),
            ("down", "down", ("removed", None, 1)),
            ("up", "down", ("updated", "down", -2)),
            ("down", "up", ("updated", "up", 2)),
        ],
    )
    def test_transition_table(self, current, requested, expected):
        assert vote_transition(current, requested) == expected

    def test_up_down_up_nets_one(self):
        score, current = 0, None
        for requested in ("up", "down", "up"):
            _, current, delta = vote_transition(current, requested)
            score += delta
        assert score == 1
        assert current == "up"


class TestNormalizeTagNames:
    def test_lowercases_and_dedupes(self):
        assert normalize_tag_names(["Python", " python ", "SQL"]) == ["python", "sql"]

    def test_empty_name(self):
        with pytest.raises(ValidationError):
            normalize_tag_names(["python", " "])

    def test_too_long(self):
        with pytest.raises(ValidationError):
            normalize_tag_names(["x" * 51])

    def test_too_many(self):
        with pytest.raises(ValidationError):
            normalize_tag_names(["a", "b", "c", "d", "e", "f"])

    def test_duplicates_do_not_count_twice(self):
        assert len(normalize_tag_names(["a", "A", "b", "c", "d", "e"])) == 5


class TestContainsPattern:
    def test_plain_text(self):
        assert contains_pattern("docker") == "%docker%"

    def test_escapes_wildcards_and_escape_char(self):
        assert contains_pattern(r"50%_off\\") == r"%50\%\_off\\\\%"


class TestInviteExpiry:
    def _invite(self, **kwargs):
        defaults = dict(status="pending", expires_at=datetime.now(timezone.utc) + timedelta(days=1))
        defaults.update(kwargs)
        return TeamInvite(**defaults)

    def test_pending_invite(self):
        invite = self._invite()
        assert invite.is_expired() is False
        assert invite.effective_status == "pending"

    def test_past_expiry_reads_as_expired(self):
        invite = self._invite(expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
        assert invite.is_expired() is True
        assert invite.effective_status == "expired"

    def test_naive_datetimes_are_utc(self):
        naive = datetime(2030, 1, 1, 12, 0)
        assert ensure_aware(naive).tzinfo is timezone.utc

    def test_accepted_invite_keeps_status(self):
        invite = self._invite(status="accepted", expires_at=datetime.now(timezone.utc) - timedelta(days=3))
        assert invite.effective_status == "accepted"


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "exc,status,kind",
        [
            (ValidationError, 400, "validation_error"),
            (Unauthenticated, 401, "unauthenticated"),
            (Forbidden, 403, "forbidden"),
            (NotFound, 404, "not_found"),
            (Conflict, 409, "conflict"),
            (InvariantViolation, 400, "invariant_violation"),
            (Expired, 400, "expired"),
        ],
    )
    def test_kinds(self, exc, status, kind):
        err = exc()
        assert isinstance(err, AppError)
        assert err.status_code == status
        assert err.kind == kind
        assert err.message

    def test_custom_message(self):
        assert str(NotFound("Question not found")) == "Question not found"

    def test_envelope_shape(self):
        assert make_error_envelope("not_found", "Team not found", "abc") == {
            "error": {"kind": "not_found", "message": "Team not found", "request_id": "abc"}
        }
