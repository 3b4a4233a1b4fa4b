"""Limits loaded from environment variables and overrides."""

import pytest

from formula.config import MAX_DEPTH_VAR, MAX_TOKENS_VAR, load_limits
from formula.models import Limits


def test_unset_means_unlimited():
    assert load_limits(env={}) == Limits(max_depth=None, max_tokens=None)


def test_blank_means_unlimited():
    assert load_limits(env={MAX_DEPTH_VAR: "  ", MAX_TOKENS_VAR: ""}) == Limits()


def test_reads_both_variables():
    limits = load_limits(env={MAX_DEPTH_VAR: "64", MAX_TOKENS_VAR: "500"})
    assert limits.max_depth == 64
    assert limits.max_tokens == 500


def test_overrides_win():
    limits = load_limits(env={MAX_DEPTH_VAR: "64"}, max_depth=8, max_tokens=10)
    assert limits == Limits(max_depth=8, max_tokens=10)


def test_defaults_to_os_environ(monkeypatch):
    monkeypatch.setenv(MAX_DEPTH_VAR, "12")
    monkeypatch.delenv(MAX_TOKENS_VAR, raising=False)
    assert load_limits() == Limits(max_depth=12)


@pytest.mark.parametrize("raw", ["abc", "0", "-3", "1.5"])
def test_invalid_values(raw):
    with pytest.raises(ValueError, match=MAX_DEPTH_VAR):
        load_limits(env={MAX_DEPTH_VAR: raw})


def test_invalid_override():
    with pytest.raises(ValueError, match="max_tokens"):
        load_limits(env={}, max_tokens=0)
