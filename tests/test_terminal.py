import io
import sys

import pytest

from doplan.terminal import (
    ENV_DISABLE_ANIMATION,
    ENV_FORCE_ANIMATION,
    animations_enabled,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(ENV_FORCE_ANIMATION, raising=False)
    monkeypatch.delenv(ENV_DISABLE_ANIMATION, raising=False)


@pytest.mark.parametrize("value", ["1", "true", "TRUE", "True"])
def test_force_enables(monkeypatch, value):
    monkeypatch.setattr(sys, "stdout", io.StringIO())
    monkeypatch.setenv(ENV_FORCE_ANIMATION, value)
    assert animations_enabled()


@pytest.mark.parametrize("value", ["1", "true", "TRUE"])
def test_disable_turns_off(monkeypatch, value):
    monkeypatch.setenv(ENV_DISABLE_ANIMATION, value)
    assert not animations_enabled()


def test_force_wins_over_disable(monkeypatch):
    monkeypatch.setenv(ENV_DISABLE_ANIMATION, "1")
    monkeypatch.setenv(ENV_FORCE_ANIMATION, "1")
    assert animations_enabled()


def test_other_force_value_is_ignored(monkeypatch):
    monkeypatch.setattr(sys, "stdout", io.StringIO())
    monkeypatch.setenv(ENV_FORCE_ANIMATION, "yes")
    assert not animations_enabled()


def test_stdout_without_fileno_disables(monkeypatch):
    monkeypatch.setattr(sys, "stdout", io.StringIO())
    assert not animations_enabled()


def test_stdout_regular_file_disables(monkeypatch, tmp_path):
    with (tmp_path / "out.txt").open("w") as handle:
        monkeypatch.setattr(sys, "stdout", handle)
        result = animations_enabled()
    assert not result