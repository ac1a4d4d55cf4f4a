"""Distributor release sheet, one row per track."""

import csv
import io
import posixpath
from typing import Iterable, List, Optional

CSV_HEADERS = [
    "ReleaseNo",
    "Primary Artist (Required)",
    "Display Artist (Optional)",
    "Featured Artist (Optional)",
    "Release Title (Required)",
    "Label (Optional)",
    "Art Work Name (Required)",
    "Cat Number (Required)",
    "Main Genre (Required)",
    "Sub Genre (Required)",
    "Original Release Date (Optional)",
    "Pre Order Date (Optional)",
    "Release Version (Optional)",
    "Track Title (Required)",
    "Version Title (Optional)",
    "Remixer (Optional)",
    "Track No. (Required)",
    "Track Audio Name (Required)",
    "Track Genre (Optional)",
    "Track SubGenre (Optional)",
    "Track ISRC (Optional)",
    "Track Artist (Optional)",
    "Track Explicit (Optional)",
    "Track Album Only (Optional)",
    "Track Price Tiers (Optional)",
    "Track Preview Start Time (Optional)",
    "Track Lyrics Language (Optional)",
    "Track Language (Optional)",
    "Track Composer (Optional)",
    "Track Producer (Optional)",
    "Track Publisher (Optional)",
    "ISRC  (Optional)",
    "Album Only (Optional)",
    "Explicit (Optional)",
    "Track Price Tiers (Optional)",
    "Audio File (Required)",
    "Release Notes (Optional)",
    "Retailers (Optional)",
    "Exclusive on Shop (Optional)",
    "Exclusive For (Optional)",
    "Allow Pre-Order on iTunes (Optional)",
]

FIRST_RELEASE_NO = 900
DEFAULT_LANGUAGE = "en"


def audio_file_name(url: Optional[str]) -> str:
    if not url:
        return ""
    return posixpath.basename(url.split("?", 1)[0])


def _flag(value) -> int:
    return 1 if value else 0


def _text(value) -> str:
    return "" if value is None else str(value)


def build_rows(release, tracks: Iterable) -> List[list]:
    rows = []
    for index, track in enumerate(tracks):
        release_no = FIRST_RELEASE_NO + index
        audio_name = audio_file_name(track.audio_file_url)
        original_date = release.original_release_date or release.release_date
        rows.append([
            release_no,
            release.primary_artist,
            _text(release.display_artist),
            _text(release.featured_artist),
            release.title,
            _text(release.label),
            _text(release.artwork_name),
            f"CAT{release_no}",
            release.main_genre,
            _text(release.sub_genre),
            _text(original_date),
            "",
            "",
            track.title,
            _text(track.mix_version),
            _text(track.remixer),
            index + 1,
            audio_name,
            _text(track.genre or release.main_genre),
            _text(release.sub_genre),
            _text(track.isrc),
            track.artist or release.primary_artist,
            _flag(track.is_explicit),
            _flag(track.album_only),
            _text(track.price_tiers),
            "",
            DEFAULT_LANGUAGE,
            DEFAULT_LANGUAGE,
            _text(track.composer),
            "",
            _text(track.publisher),
            "",
            _flag(track.album_only),
            _flag(track.is_explicit),
            _text(track.price_tiers),
            audio_name,
            _text(release.release_notes),
            ", ".join(release.retailers or []),
            "",
            _text(release.exclusive_for),
            1,
        ])
    return rows


def generate_release_csv(release, tracks: Iterable) -> str:
    """Render the release sheet. Values containing commas or quotes are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(build_rows(release, tracks))
    return buffer.getvalue()
