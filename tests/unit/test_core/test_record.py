# tests/unit/test_core/test_record.py

"""Tests for Record and user id normalization."""

from __future__ import annotations

import dataclasses

import pytest

from smartlists.core.record import NEVER_PLAYED, PEOPLE_ROLE_ATTRS, Record, normalize_user_id

USER_ID = "5d5c2c4e-8f3a-4b55-9a0d-2f6b1c7e9a10"
USER_KEY = "5d5c2c4e8f3a4b559a0d2f6b1c7e9a10"


class TestNormalizeUserId:
    """Tests for normalize_user_id."""

    def test_dashed_uuid(self) -> None:
        assert normalize_user_id(USER_ID) == USER_KEY

    def test_already_normalized(self) -> None:
        assert normalize_user_id(USER_KEY) == USER_KEY

    def test_braces_and_upper_case(self) -> None:
        assert normalize_user_id("{" + USER_ID.upper() + "}") == USER_KEY

    def test_non_uuid_returned_unchanged(self) -> None:
        assert normalize_user_id("alice") == "alice"

    def test_empty(self) -> None:
        assert normalize_user_id(None) == ""
        assert normalize_user_id("") == ""


class TestPerUserAccessors:
    """Tests for per-user state lookups."""

    @pytest.fixture
    def record(self) -> Record:
        return Record(
            item_id="1",
            name="Alien",
            is_played_by_user={USER_KEY: True},
            play_count_by_user={USER_KEY: 4},
            is_favorite_by_user={USER_KEY: False},
            next_unwatched_by_user={USER_KEY: True},
            last_played_date_by_user={USER_KEY: 1700000000.0},
        )

    def test_lookup_accepts_any_id_form(self, record: Record) -> None:
        """Dashed and compact ids resolve to the same entry."""
        assert record.is_played(USER_ID) is True
        assert record.is_played(USER_KEY) is True
        assert record.play_count(USER_ID) == 4
        assert record.is_next_unwatched(USER_ID) is True
        assert record.last_played(USER_ID) == 1700000000.0

    def test_unknown_user_defaults(self, record: Record) -> None:
        other = "0b7f6a1e-3c2d-4e5f-8a9b-1c2d3e4f5a6b"
        assert record.is_played(other) is False
        assert record.play_count(other) == 0
        assert record.is_favorite(other) is False
        assert record.is_next_unwatched(other) is False
        assert record.last_played(other) == NEVER_PLAYED


class TestRecordShape:
    """Tests for defaults and role access."""

    def test_defaults_are_empty(self) -> None:
        record = Record()
        assert record.name == ""
        assert record.genres == []
        assert record.framerate is None
        assert record.production_year == 0

    def test_list_defaults_not_shared(self) -> None:
        assert Record().genres is not Record().genres

    def test_record_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            Record().name = "changed"  # type: ignore[misc]

    def test_every_role_maps_to_an_attribute(self) -> None:
        names = {f.name for f in dataclasses.fields(Record)}
        assert set(PEOPLE_ROLE_ATTRS.values()) <= names

    def test_people_for_role(self) -> None:
        record = Record(actors=["Sigourney Weaver"], guest_stars=["Lance Henriksen"])
        assert record.people_for_role("Actors") == ["Sigourney Weaver"]
        assert record.people_for_role("gueststars") == ["Lance Henriksen"]
        assert record.people_for_role("Stuntmen") == []
