"""Distributor CSV sheet: header layout, per-track rows and quoting."""
import csv
import io
from datetime import date
from types import SimpleNamespace

from onesync.services.csv_export import CSV_HEADERS, audio_file_name, build_rows, generate_release_csv


def _release(**overrides):
    fields = dict(
        title="Midnight Circuit",
        primary_artist="Nova Lights",
        display_artist=None,
        featured_artist="Guest, Singer",
        label=None,
        artwork_name="cover.jpg",
        main_genre="Electronic",
        sub_genre="House",
        release_date=date(2025, 3, 1),
        original_release_date=None,
        release_notes=None,
        retailers=["Spotify", "Apple Music"],
        exclusive_for=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _track(title, **overrides):
    fields = dict(
        title=title,
        artist=None,
        genre=None,
        mix_version=None,
        remixer=None,
        isrc=None,
        is_explicit=False,
        album_only=False,
        price_tiers=None,
        composer=None,
        publisher=None,
        audio_file_url=f"/storage/audio-files/u1/1700000000000_{title.lower()}.wav",
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _parse(content: str):
    return list(csv.reader(io.StringIO(content)))


class TestHeaders:
    def test_has_41_columns(self):
        assert len(CSV_HEADERS) == 41

    def test_first_and_last_columns(self):
        assert CSV_HEADERS[0] == "ReleaseNo"
        assert CSV_HEADERS[-1] == "Allow Pre-Order on iTunes (Optional)"


class TestRows:
    def test_one_row_per_track_with_release_numbers(self):
        rows = build_rows(_release(), [_track("Intro"), _track("Outro")])
        assert len(rows) == 2
        assert [row[0] for row in rows] == [900, 901]
        assert [row[7] for row in rows] == ["CAT900", "CAT901"]
        assert [row[16] for row in rows] == [1, 2]

    def test_every_row_matches_header_width(self):
        rows = build_rows(_release(), [_track("Intro")])
        assert len(rows[0]) == len(CSV_HEADERS)

    def test_flags_are_one_or_zero(self):
        row = build_rows(_release(), [_track("Intro", is_explicit=True, album_only=False)])[0]
        assert row[CSV_HEADERS.index("Track Explicit (Optional)")] == 1
        assert row[CSV_HEADERS.index("Track Album Only (Optional)")] == 0
        assert row[CSV_HEADERS.index("Explicit (Optional)")] == 1

    def test_language_and_preorder_defaults(self):
        row = build_rows(_release(), [_track("Intro")])[0]
        assert row[CSV_HEADERS.index("Track Lyrics Language (Optional)")] == "en"
        assert row[CSV_HEADERS.index("Track Language (Optional)")] == "en"
        assert row[-1] == 1

    def test_retailers_joined(self):
        row = build_rows(_release(), [_track("Intro")])[0]
        assert row[CSV_HEADERS.index("Retailers (Optional)")] == "Spotify, Apple Music"

    def test_original_date_falls_back_to_release_date(self):
        row = build_rows(_release(), [_track("Intro")])[0]
        assert row[CSV_HEADERS.index("Original Release Date (Optional)")] == "2025-03-01"

    def test_track_artist_falls_back_to_primary(self):
        row = build_rows(_release(), [_track("Intro")])[0]
        assert row[CSV_HEADERS.index("Track Artist (Optional)")] == "Nova Lights"


class TestGenerate:
    def test_commas_survive_round_trip(self):
        content = generate_release_csv(_release(title='Live, "Loud"'), [_track("Intro")])
        header, row = _parse(content)
        assert header == CSV_HEADERS
        assert row[CSV_HEADERS.index("Release Title (Required)")] == 'Live, "Loud"'
        assert row[CSV_HEADERS.index("Featured Artist (Optional)")] == "Guest, Singer"

    def test_no_tracks_gives_header_only(self):
        assert _parse(generate_release_csv(_release(), [])) == [CSV_HEADERS]


class TestAudioFileName:
    def test_strips_path_and_query(self):
        assert audio_file_name("/storage/audio-files/u/123_song.wav?token=x") == "123_song.wav"

    def test_empty(self):
        assert audio_file_name(None) == ""
