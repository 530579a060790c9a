"""Tests for the saved actions store."""

import pytest

from models.database import Action, ActionsDB


@pytest.fixture
def db(tmp_path):
    return ActionsDB(db_path=str(tmp_path / "actions.db"))


def test_missing_action(db) -> None:
    assert db.get_action_roll("fireball") is None


def test_create_then_update(db) -> None:
    assert db.add_or_update_action("fireball", "8d6") is False
    assert db.get_action_roll("fireball") == "8d6"

    assert db.add_or_update_action("fireball", "9d6") is True
    assert db.get_action_roll("fireball") == "9d6"


def test_delete(db) -> None:
    db.add_or_update_action("stab", "1d4+2")
    assert db.delete_action("stab") is True
    assert db.get_action_roll("stab") is None
    assert db.delete_action("stab") is False


def test_list_is_sorted_by_name(db) -> None:
    db.add_or_update_action("smite", "2d8")
    db.add_or_update_action("attack", "1d20+5")
    assert db.list_actions() == [Action("attack", "1d20+5"), Action("smite", "2d8")]


def test_data_survives_reopen(tmp_path) -> None:
    path = str(tmp_path / "actions.db")
    ActionsDB(db_path=path).add_or_update_action("heal", "2d4+2")
    assert ActionsDB(db_path=path).get_action_roll("heal") == "2d4+2"


def test_counter_increments_and_persists(tmp_path) -> None:
    path = str(tmp_path / "actions.db")
    db = ActionsDB(db_path=path)
    assert db.increment_counter("heh") == 1
    assert db.increment_counter("heh") == 2
    assert ActionsDB(db_path=path).increment_counter("heh") == 3
    assert db.increment_counter("other") == 1
