"""Tests for identifier generation."""

import re

from game.logic.utils import generate_id

_ID_PATTERN = re.compile(r"^\d{13,}-[a-z0-9]{9}$")


def test_id_has_timestamp_and_suffix():
    assert _ID_PATTERN.match(generate_id())


def test_ids_do_not_collide():
    ids = {generate_id() for _ in range(1000)}
    assert len(ids) == 1000
