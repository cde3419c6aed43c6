"""Unit tests for team name normalization used in provider searches."""

import pytest

from teamlogos.normalization.normalizer import fold_special_characters, normalize_team_name


class TestNormalizeTeamName:
    def test_folds_umlauts(self):
        assert normalize_team_name("Bayern München") == "Bayern Munchen"

    def test_strips_trailing_fc(self):
        assert normalize_team_name("Arsenal FC") == "Arsenal"

    def test_strips_trailing_year(self):
        assert normalize_team_name("Club 1909") == "Club"

    def test_strips_other_suffixes(self):
        assert normalize_team_name("Bournemouth AFC") == "Bournemouth"
        assert normalize_team_name("Valencia CF") == "Valencia"
        assert normalize_team_name("Milan AC") == "Milan"

    def test_keeps_leading_prefix(self):
        """Only trailing suffixes are organizational noise."""
        assert normalize_team_name("FC Bar") == "FC Bar"
        assert normalize_team_name("AC Milan") == "AC Milan"

    def test_suffix_must_be_a_whole_word(self):
        assert normalize_team_name("Kickersfc") == "Kickersfc"
        assert normalize_team_name("Team12345") == "Team12345"

    def test_ampersand(self):
        assert normalize_team_name("Brighton & Hove Albion") == "Brighton and Hove Albion"
        assert normalize_team_name("A&B") == "A and B"

    def test_digraphs(self):
        assert normalize_team_name("Straße") == "Strasse"
        assert normalize_team_name("Æbeltoft") == "AEbeltoft"
        assert normalize_team_name("Bodø Glimt") == "Bodo Glimt"

    def test_stacked_suffixes(self):
        assert normalize_team_name("Borussia 1909 FC") == "Borussia"

    def test_unknown_characters_pass_through(self):
        assert normalize_team_name("Beşiktaş") == "Beşiktaş"

    def test_empty_and_whitespace(self):
        assert normalize_team_name("") == ""
        assert normalize_team_name("   ") == ""

    @pytest.mark.parametrize(
        "name",
        [
            "Bayern München",
            "Arsenal FC FC",
            "Club 1909",
            "  Real Sociedad & Co  ",
            "1909 FC",
            "&",
            "Atlético Madrid",
            "Sporting CP",
            "FC",
        ],
    )
    def test_idempotent(self, name):
        once = normalize_team_name(name)
        assert normalize_team_name(once) == once


def test_fold_special_characters_only_maps_table():
    assert fold_special_characters(" Atlético FC ") == "Atletico FC"
