"""Tests for the role hierarchy."""

import itertools

import pytest

from minepanel.core.roles import ROLE_LEVEL, Role, meets_min_role, role_level


def test_levels():
    assert ROLE_LEVEL == {"VIEWER": 1, "MOD": 2, "ADMIN": 3}


@pytest.mark.parametrize("actual,required", list(itertools.product(Role, Role)))
def test_meets_min_role_follows_levels(actual: Role, required: Role):
    expected = ROLE_LEVEL[actual.value] >= ROLE_LEVEL[required.value]
    assert meets_min_role(actual, required) is expected


def test_known_pairs():
    assert meets_min_role(Role.ADMIN, Role.VIEWER) is True
    assert meets_min_role(Role.VIEWER, Role.ADMIN) is False
    assert meets_min_role(Role.MOD, Role.MOD) is True


def test_accepts_plain_strings():
    assert meets_min_role("ADMIN", "MOD") is True
    assert meets_min_role("VIEWER", "MOD") is False


def test_unknown_role_ranks_lowest():
    assert role_level("OWNER") == 0
    assert meets_min_role("OWNER", Role.VIEWER) is False
