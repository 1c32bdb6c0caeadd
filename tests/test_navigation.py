"""Discipline navigation: any discipline from any other, persisted on select."""
import itertools
import logging

import pytest

from app.models.enums import DisciplineEnum
from app.services.navigation import DisciplineNavigator


def test_starts_with_no_report_loaded():
    navigator = DisciplineNavigator()

    assert navigator.active is None
    assert not navigator.has_report


def test_load_uses_current_discipline_or_defaults_to_d1():
    navigator = DisciplineNavigator()

    assert navigator.load({"currentDiscipline": "D6"}) == DisciplineEnum.D6
    assert navigator.load({}) == DisciplineEnum.D1
    assert navigator.load({"currentDiscipline": "D9"}) == DisciplineEnum.D1
    assert navigator.load(None) is None
    assert not navigator.has_report


@pytest.mark.parametrize(
    "origin,target",
    list(itertools.product(list(DisciplineEnum), repeat=2)),
)
def test_every_transition_succeeds_and_is_persisted(origin, target):
    persisted = []
    navigator = DisciplineNavigator(persist=lambda d: persisted.append(d) or True)
    navigator.load({"currentDiscipline": origin.value})

    assert navigator.select(target.value) == target
    assert navigator.active == target
    assert persisted == [target]


def test_unknown_discipline_is_rejected():
    navigator = DisciplineNavigator(persist=lambda d: True)
    navigator.load({"currentDiscipline": "D2"})

    with pytest.raises(ValueError):
        navigator.select("D9")
    assert navigator.active == DisciplineEnum.D2


def test_persist_failure_keeps_the_selection(caplog):
    navigator = DisciplineNavigator(persist=lambda d: False)
    navigator.load({"currentDiscipline": "D1"})

    with caplog.at_level(logging.WARNING):
        assert navigator.select(DisciplineEnum.D4) == DisciplineEnum.D4

    assert navigator.active == DisciplineEnum.D4
    assert "Could not persist" in caplog.text


def test_per_call_persist_overrides_default():
    default_calls, override_calls = [], []
    navigator = DisciplineNavigator(persist=lambda d: default_calls.append(d) or True)

    navigator.select("D3", persist=lambda d: override_calls.append(d) or True)

    assert default_calls == []
    assert override_calls == [DisciplineEnum.D3]
