# smartlists/core/record.py

"""Flat per-item metadata record evaluated by smart list rules.

The host builds one Record per library item for each refresh pass. Everything
a rule can look at lives directly on the record so a compiled predicate only
needs attribute access. Dates are Unix seconds (UTC) with 0 meaning unknown.
Per-user state is kept in maps keyed by the normalized user id.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

__all__ = [
    "NEVER_PLAYED",
    "PEOPLE_ROLE_ATTRS",
    "Record",
    "normalize_user_id",
]

# Value stored in last_played_date_by_user when an item was never played
NEVER_PLAYED: float = -1.0

# Rule field name -> Record attribute for every cast/crew list
PEOPLE_ROLE_ATTRS: dict[str, str] = {
    "People": "people",
    "Actors": "actors",
    "Directors": "directors",
    "Composers": "composers",
    "Writers": "writers",
    "GuestStars": "guest_stars",
    "Producers": "producers",
    "Conductors": "conductors",
    "Lyricists": "lyricists",
    "Arrangers": "arrangers",
    "SoundEngineers": "sound_engineers",
    "Mixers": "mixers",
    "Remixers": "remixers",
    "Creators": "creators",
    "PersonArtists": "person_artists",
    "PersonAlbumArtists": "person_album_artists",
    "Authors": "authors",
    "Illustrators": "illustrators",
    "Pencilers": "pencilers",
    "Inkers": "inkers",
    "Colorists": "colorists",
    "Letterers": "letterers",
    "CoverArtists": "cover_artists",
    "Editors": "editors",
    "Translators": "translators",
}


def normalize_user_id(user_id: str | None) -> str:
    """Brings a user id into the form used as per-user map key.

    UUIDs (with or without dashes or braces) become 32 lower-case hex
    characters. Anything else is returned unchanged.

    Args:
        user_id: The raw user id.

    Returns:
        The normalized id, or an empty string for None.
    """
    if not user_id:
        return ""
    try:
        return uuid.UUID(user_id.strip()).hex
    except ValueError:
        return user_id


@dataclass(frozen=True)
class Record:
    """Metadata of one library item as seen by the rule engine.

    Attributes not populated by the host keep their empty defaults, which
    every rule treats as "absent" rather than as an error.
    """

    item_id: str = ""

    # Scalar strings
    name: str = ""
    item_type: str = ""
    media_type: str = ""
    album: str = ""
    series_name: str = ""
    official_rating: str = ""
    overview: str = ""
    file_name: str = ""
    folder_path: str = ""

    # Scalar numbers
    community_rating: float = 0.0
    critic_rating: float = 0.0
    production_year: int = 0
    runtime_minutes: float = 0.0
    season_number: int = 0
    episode_number: int = 0
    disc_number: int = 0
    track_number: int = 0

    # Dates in Unix seconds, 0 = unknown
    date_created: float = 0.0
    date_last_refreshed: float = 0.0
    date_last_saved: float = 0.0
    date_modified: float = 0.0
    release_date: float = 0.0

    # Multi-valued strings
    genres: list[str] = field(default_factory=list)
    studios: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    artists: list[str] = field(default_factory=list)
    album_artists: list[str] = field(default_factory=list)
    collections: list[str] = field(default_factory=list)
    audio_languages: list[str] = field(default_factory=list)
    default_audio_languages: list[str] = field(default_factory=list)

    # Values inherited from the parent series (episodes only)
    parent_series_tags: list[str] = field(default_factory=list)
    parent_series_studios: list[str] = field(default_factory=list)
    parent_series_genres: list[str] = field(default_factory=list)

    # Cast and crew
    people: list[str] = field(default_factory=list)
    actors: list[str] = field(default_factory=list)
    directors: list[str] = field(default_factory=list)
    composers: list[str] = field(default_factory=list)
    writers: list[str] = field(default_factory=list)
    guest_stars: list[str] = field(default_factory=list)
    producers: list[str] = field(default_factory=list)
    conductors: list[str] = field(default_factory=list)
    lyricists: list[str] = field(default_factory=list)
    arrangers: list[str] = field(default_factory=list)
    sound_engineers: list[str] = field(default_factory=list)
    mixers: list[str] = field(default_factory=list)
    remixers: list[str] = field(default_factory=list)
    creators: list[str] = field(default_factory=list)
    person_artists: list[str] = field(default_factory=list)
    person_album_artists: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    illustrators: list[str] = field(default_factory=list)
    pencilers: list[str] = field(default_factory=list)
    inkers: list[str] = field(default_factory=list)
    colorists: list[str] = field(default_factory=list)
    letterers: list[str] = field(default_factory=list)
    cover_artists: list[str] = field(default_factory=list)
    editors: list[str] = field(default_factory=list)
    translators: list[str] = field(default_factory=list)

    # Audio stream
    audio_bitrate: int = 0
    audio_sample_rate: int = 0
    audio_bit_depth: int = 0
    audio_channels: int = 0
    audio_codec: str = ""
    audio_profile: str = ""

    # Video stream
    resolution: str = ""
    framerate: float | None = None
    video_codec: str = ""
    video_profile: str = ""
    video_range: str = ""
    video_range_type: str = ""

    # Per-user state keyed by normalized user id
    is_played_by_user: dict[str, bool] = field(default_factory=dict)
    play_count_by_user: dict[str, int] = field(default_factory=dict)
    is_favorite_by_user: dict[str, bool] = field(default_factory=dict)
    next_unwatched_by_user: dict[str, bool] = field(default_factory=dict)
    last_played_date_by_user: dict[str, float] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Per-user accessors
    # ------------------------------------------------------------------

    def is_played(self, user_id: str) -> bool:
        return self.is_played_by_user.get(normalize_user_id(user_id), False)

    def play_count(self, user_id: str) -> int:
        return self.play_count_by_user.get(normalize_user_id(user_id), 0)

    def is_favorite(self, user_id: str) -> bool:
        return self.is_favorite_by_user.get(normalize_user_id(user_id), False)

    def is_next_unwatched(self, user_id: str) -> bool:
        return self.next_unwatched_by_user.get(normalize_user_id(user_id), False)

    def last_played(self, user_id: str) -> float:
        """Returns the last played date for a user, or ``NEVER_PLAYED``."""
        return self.last_played_date_by_user.get(normalize_user_id(user_id), NEVER_PLAYED)

    def people_for_role(self, role: str) -> list[str]:
        """Returns the names credited under a cast/crew role.

        Args:
            role: A key of ``PEOPLE_ROLE_ATTRS``, matched case-insensitively.

        Returns:
            The list of names, empty for unknown roles.
        """
        for key, attr in PEOPLE_ROLE_ATTRS.items():
            if key.lower() == role.lower():
                return getattr(self, attr)
        return []
