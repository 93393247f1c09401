"""Unit tests for status vocabularies and mappers."""

from datetime import date

import pytest

from fantasy_tennis.statuses import (
    ENTRY_TYPES,
    MATCH_STATUSES,
    PARTICIPATION_STATUSES,
    derive_tournament_status,
    map_entry_type,
    map_match_status,
    map_participation_status,
)


class TestMatchStatus:

    @pytest.mark.parametrize("raw,expected", [
        ("not_started", "scheduled"),
        ("live", "in_progress"),
        ("in_progress", "in_progress"),
        ("closed", "completed"),
        ("ended", "completed"),
        ("Finished", "completed"),
        ("postponed", "cancelled"),
        ("abandoned", "cancelled"),
        ("in progress", "in_progress"),
    ])
    def test_known_values(self, raw, expected):
        assert map_match_status(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "interrupted", "delayed"])
    def test_unknown_defaults_to_scheduled(self, raw):
        assert map_match_status(raw) == "scheduled"

    def test_output_always_in_vocabulary(self):
        for raw in ("closed", "live", "weird", None):
            assert map_match_status(raw) in MATCH_STATUSES


class TestParticipationStatus:

    def test_passthrough(self):
        for status in PARTICIPATION_STATUSES:
            assert map_participation_status(status) == status

    def test_aliases(self):
        assert map_participation_status("registered") == "confirmed"
        assert map_participation_status("Lucky Loser") == "alternate"
        assert map_participation_status("walkover") == "withdrawn"

    def test_unknown_defaults_to_confirmed(self):
        assert map_participation_status(None) == "confirmed"
        assert map_participation_status("something") == "confirmed"


class TestEntryType:

    def test_passthrough(self):
        for entry_type in ENTRY_TYPES:
            assert map_entry_type(entry_type) == entry_type

    @pytest.mark.parametrize("raw,expected", [
        ("WC", "wildcard"),
        ("wild-card", "wildcard"),
        ("Q", "qualifying"),
        ("LL", "alternate"),
        ("direct_acceptance", "main_draw"),
    ])
    def test_aliases(self, raw, expected):
        assert map_entry_type(raw) == expected

    def test_unknown_defaults_to_main_draw(self):
        assert map_entry_type(None) == "main_draw"
        assert map_entry_type("protected_ranking") == "main_draw"


class TestTournamentStatus:
    today = date(2025, 6, 15)

    def test_completed(self):
        assert derive_tournament_status(date(2025, 6, 1), date(2025, 6, 8), self.today) == "completed"

    def test_ongoing(self):
        assert derive_tournament_status(date(2025, 6, 10), date(2025, 6, 20), self.today) == "ongoing"

    def test_ongoing_on_first_and_last_day(self):
        assert derive_tournament_status(self.today, date(2025, 6, 20), self.today) == "ongoing"
        assert derive_tournament_status(date(2025, 6, 10), self.today, self.today) == "ongoing"

    def test_upcoming(self):
        assert derive_tournament_status(date(2025, 7, 1), date(2025, 7, 7), self.today) == "upcoming"

    def test_unknown_dates_are_upcoming(self):
        assert derive_tournament_status(None, None, self.today) == "upcoming"
