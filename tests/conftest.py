# tests/conftest.py
from __future__ import annotations

import pytest

from smartlists.core.record import Record
from smartlists.services.smart_lists.compiler import RuleCompiler
from smartlists.services.smart_lists.evaluator import SmartListEvaluator

# 2024-03-15T12:00:00Z
NOW = 1710504000.0

# 2024-03-10T00:00:00Z, a Sunday
MARCH_10 = 1710028800.0

DAY = 86400.0

USER_ID = "5d5c2c4e-8f3a-4b55-9a0d-2f6b1c7e9a10"
USER_KEY = "5d5c2c4e8f3a4b559a0d2f6b1c7e9a10"

OTHER_USER_ID = "0b7f6a1e-3c2d-4e5f-8a9b-1c2d3e4f5a6b"
OTHER_USER_KEY = "0b7f6a1e3c2d4e5f8a9b1c2d3e4f5a6b"


@pytest.fixture
def now() -> float:
    """Fixed evaluation time, 2024-03-15T12:00:00Z."""
    return NOW


@pytest.fixture
def user_id() -> str:
    """Owner id in dashed UUID form."""
    return USER_ID


@pytest.fixture
def compiler() -> RuleCompiler:
    """Compiler with a frozen clock."""
    return RuleCompiler(clock=lambda: NOW)


@pytest.fixture
def evaluator(compiler) -> SmartListEvaluator:
    """Evaluator sharing the frozen-clock compiler."""
    return SmartListEvaluator(compiler=compiler)


@pytest.fixture
def movie_alien() -> Record:
    """A sci-fi horror film with full metadata."""
    return Record(
        item_id="m1",
        name="Alien",
        item_type="Movie",
        media_type="Video",
        official_rating="R",
        overview="The crew of a commercial spacecraft encounters a deadly lifeform.",
        community_rating=8.5,
        critic_rating=98.0,
        production_year=1979,
        runtime_minutes=117.0,
        date_created=MARCH_10 + 3600,
        release_date=298771200.0,
        genres=["Science Fiction", "Horror"],
        studios=["20th Century Fox"],
        tags=["space", "creature"],
        people=["Sigourney Weaver", "Ridley Scott"],
        actors=["Sigourney Weaver", "Tom Skerritt"],
        directors=["Ridley Scott"],
        collections=["Favourites [Smart]"],
        audio_languages=["eng", "fre"],
        default_audio_languages=["eng"],
        audio_codec="dts",
        audio_channels=6,
        resolution="1080p",
        framerate=23.976,
        video_codec="h264",
        is_played_by_user={USER_KEY: True},
        play_count_by_user={USER_KEY: 3},
        is_favorite_by_user={USER_KEY: True},
        last_played_date_by_user={USER_KEY: NOW - 2 * DAY},
    )


@pytest.fixture
def movie_aliens() -> Record:
    """The sequel, sharing genres and tags with Alien."""
    return Record(
        item_id="m2",
        name="Aliens",
        item_type="Movie",
        official_rating="R",
        community_rating=8.4,
        production_year=1986,
        runtime_minutes=137.0,
        date_created=MARCH_10 - 30 * DAY,
        genres=["Science Fiction", "Action"],
        tags=["space", "creature", "marines"],
        people=["Sigourney Weaver", "James Cameron"],
        actors=["Sigourney Weaver", "Michael Biehn"],
        directors=["James Cameron"],
        resolution="4K",
        framerate=24.0,
        play_count_by_user={USER_KEY: 1},
        last_played_date_by_user={USER_KEY: NOW - 400 * DAY},
    )


@pytest.fixture
def movie_comedy() -> Record:
    """An unrelated comedy that was never played."""
    return Record(
        item_id="m3",
        name="Airplane!",
        item_type="Movie",
        official_rating="PG",
        community_rating=7.7,
        production_year=1980,
        runtime_minutes=88.0,
        date_created=MARCH_10 - 400 * DAY,
        genres=["Comedy"],
        tags=["parody"],
        resolution="720p",
    )


@pytest.fixture
def episode() -> Record:
    """An episode carrying its parent series' tags and genres."""
    return Record(
        item_id="e1",
        name="Pilot",
        item_type="Episode",
        series_name="The Expanse",
        season_number=1,
        episode_number=1,
        runtime_minutes=45.0,
        genres=["Drama"],
        tags=[],
        parent_series_tags=["space", "politics"],
        parent_series_genres=["Science Fiction", "Drama"],
        next_unwatched_by_user={USER_KEY: True},
    )


@pytest.fixture
def library(movie_alien, movie_aliens, movie_comedy, episode) -> list[Record]:
    """All sample records."""
    return [movie_alien, movie_aliens, movie_comedy, episode]
