import pytest

from topic_review.config import DEFAULT_MAX_ROUNDS
from topic_review.db import init_db
from topic_review.settings import get_max_rounds, get_setting, set_max_rounds, set_setting


def test_setting_roundtrip(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "theme") is None
    assert get_setting(tmp_db, "theme", "dark") == "dark"
    set_setting(tmp_db, "theme", "light")
    set_setting(tmp_db, "theme", "solar")
    assert get_setting(tmp_db, "theme") == "solar"


def test_max_rounds_default(tmp_db):
    init_db(tmp_db)
    assert get_max_rounds(tmp_db) == DEFAULT_MAX_ROUNDS == 10


def test_max_rounds_override(tmp_db):
    init_db(tmp_db)
    set_max_rounds(tmp_db, 4)
    assert get_max_rounds(tmp_db) == 4


def test_max_rounds_disabled(tmp_db):
    init_db(tmp_db)
    set_max_rounds(tmp_db, 0)
    assert get_max_rounds(tmp_db) is None
    set_setting(tmp_db, "max_rounds", "None")
    assert get_max_rounds(tmp_db) is None


def test_max_rounds_invalid(tmp_db):
    init_db(tmp_db)
    set_setting(tmp_db, "max_rounds", "lots")
    with pytest.raises(ValueError):
        get_max_rounds(tmp_db)
    with pytest.raises(ValueError):
        set_max_rounds(tmp_db, -1)
