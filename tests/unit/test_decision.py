"""Tests for the duplicate decision rule."""

from collections.abc import Callable

import pytest

from casematch.decision import (
    DEFAULT_THRESHOLDS,
    MatchThresholds,
    ReasonCode,
    evaluate_pair,
    is_duplicate,
    make_decision,
)
from casematch.models import ClientRecord, IntakeDraft


@pytest.mark.unit
def test_name_only_match_without_dob(make_client: Callable[..., ClientRecord]) -> None:
    """Test Jon/John Smith (avg 0.875) is a duplicate with no DOB."""
    jon = make_client("Jon", "Smith")
    john = make_client("John", "Smith")

    evaluation = evaluate_pair(jon, john)

    assert evaluation.score == pytest.approx(0.875)
    assert evaluation.is_duplicate
    assert evaluation.reason == ReasonCode.NAME_ONLY


@pytest.mark.unit
def test_dob_lowers_bar(make_client: Callable[..., ClientRecord]) -> None:
    """Test Robert/Rob Jones (avg 0.75) needs the DOB match."""
    robert = make_client("Robert", "Jones", date_of_birth="1980-03-14")
    rob_same = make_client("Rob", "Jones", date_of_birth="1980-03-14")
    rob_other = make_client("Rob", "Jones", date_of_birth="1981-03-14")
    rob_unknown = make_client("Rob", "Jones")

    assert evaluate_pair(robert, rob_same).reason == ReasonCode.DOB_AND_NAME
    assert not is_duplicate(robert, rob_other)
    assert not is_duplicate(robert, rob_unknown)


@pytest.mark.unit
def test_is_duplicate_symmetric(make_client: Callable[..., ClientRecord]) -> None:
    """Test is_duplicate(a, b) == is_duplicate(b, a)."""
    people = [
        make_client("Jon", "Smith"),
        make_client("John", "Smith", date_of_birth="1990-01-01"),
        make_client("Johan", "Smyth", date_of_birth="1990-01-01"),
        make_client("Maria", None),
    ]
    for a in people:
        for b in people:
            assert is_duplicate(a, b) == is_duplicate(b, a)


@pytest.mark.unit
def test_thresholds_are_strict(make_client: Callable[..., ClientRecord]) -> None:
    """Test an average exactly at the bar is not a duplicate."""
    assert make_decision(0.85, False, DEFAULT_THRESHOLDS) == (False, ReasonCode.BELOW_THRESHOLD)
    assert make_decision(0.6, True, DEFAULT_THRESHOLDS) == (False, ReasonCode.BELOW_THRESHOLD)
    assert make_decision(0.61, True, DEFAULT_THRESHOLDS) == (True, ReasonCode.DOB_AND_NAME)


@pytest.mark.unit
def test_missing_last_names_compare_equal(make_client: Callable[..., ClientRecord]) -> None:
    """Test two clients with no last name score 1.0 on the last-name side."""
    evaluation = evaluate_pair(make_client("Cher"), make_client("Cher"))

    assert evaluation.last_sim == 1.0
    assert evaluation.is_duplicate


@pytest.mark.unit
def test_draft_compares_like_client(make_client: Callable[..., ClientRecord]) -> None:
    """Test an intake draft is accepted wherever a client is."""
    draft = IntakeDraft(first_name="Jon", last_name="Smith")

    assert is_duplicate(draft, make_client("John", "Smith"))


@pytest.mark.unit
def test_custom_thresholds(make_client: Callable[..., ClientRecord]) -> None:
    """Test stricter thresholds reject the default-accepted pair."""
    strict = MatchThresholds(dob_match=0.8, name_only=0.9)

    assert not is_duplicate(make_client("Jon", "Smith"), make_client("John", "Smith"), strict)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("dob_match", "name_only"),
    [(-0.1, 0.85), (0.6, 1.5), (0.9, 0.8)],
)
def test_invalid_thresholds(dob_match: float, name_only: float) -> None:
    """Test MatchThresholds rejects out-of-range or inverted bars."""
    with pytest.raises(ValueError):
        MatchThresholds(dob_match=dob_match, name_only=name_only)


@pytest.mark.unit
def test_evaluation_to_dict(make_client: Callable[..., ClientRecord]) -> None:
    """Test PairEvaluation serializes its reason as a string."""
    data = evaluate_pair(make_client("Jon", "Smith"), make_client("John", "Smith")).to_dict()

    assert data["reason"] == "name_only"
    assert data["score"] == 0.875
    assert data["same_dob"] is False
