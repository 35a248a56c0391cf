"""
Test Planner - Identity & Access Tests
"""
from types import SimpleNamespace

import pytest

from app.core.exceptions import UnauthorizedError, ValidationError
from app.services.access import (
    ensure_plan_access,
    has_plan_access,
    identity_set,
    normalize_identities,
    normalize_identity,
)


@pytest.mark.parametrize("value,expected", [
    (5, 5),
    ("42", 42),
    (" 42 ", 42),
    (7.0, 7),
    (9007199254740993, 9007199254740993),
    ("9007199254740993", 9007199254740993),
])
def test_normalize_identity_accepts(value, expected):
    assert normalize_identity(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "abc", "12a", True, False, 1.5, 0, -3, "-3", "0", [1]])
def test_normalize_identity_rejects(value):
    with pytest.raises(ValidationError):
        normalize_identity(value)


def test_normalize_identity_names_field():
    with pytest.raises(ValidationError, match="student_id"):
        normalize_identity("nope", "student_id")


def test_normalize_identities_dedupes_in_order():
    assert normalize_identities(["3", 1, 3.0, "1", 2], "topic_id") == [3, 1, 2]
    assert normalize_identities(None, "topic_id") == []


def test_normalize_identities_rejects_any_bad_item():
    with pytest.raises(ValidationError, match="topic_id"):
        normalize_identities([1, "x"], "topic_id")


class TestIdentitySet:
    def test_none(self):
        assert identity_set(None) == set()

    def test_bare_identities(self):
        assert identity_set(3) == {3}
        assert identity_set("3") == {3}

    def test_collections(self):
        assert identity_set([1, "2", (3,)]) == {1, 2, 3}

    def test_records(self):
        assert identity_set({"user_id": 5}) == {5}
        assert identity_set({"id": 6}) == {6}
        assert identity_set(SimpleNamespace(id=9)) == {9}

    def test_user_id_preferred_over_id(self):
        assert identity_set(SimpleNamespace(user_id=4, id=99)) == {4}

    def test_mixed_shapes(self):
        relation = [SimpleNamespace(id=1), {"user_id": "2"}, 3]
        assert identity_set(relation) == {1, 2, 3}


class TestPlanAccess:
    def test_student_and_planner_allowed(self):
        assert has_plan_access(1, 2, 1)
        assert has_plan_access(1, 2, "2")

    def test_outsider_denied(self):
        assert not has_plan_access(1, 2, 3)

    def test_relation_shapes(self):
        assert has_plan_access([SimpleNamespace(id=1)], {"user_id": 2}, 2)

    def test_ensure_raises(self):
        with pytest.raises(UnauthorizedError):
            ensure_plan_access(1, 2, 3)

    def test_bad_actor_identity(self):
        with pytest.raises(ValidationError):
            ensure_plan_access(1, 2, None)
