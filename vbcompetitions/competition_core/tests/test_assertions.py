"""
Tests for the fluent assertion interface.
"""

import unittest

from vbcompetitions.competition_core.assertions import assert_knockout, assert_league
from vbcompetitions.competition_core.scoring import LeaguePoints
from vbcompetitions.competition_core.tests.test_utils import create_played_league, create_teams


class TestLeagueAssertions(unittest.TestCase):
    """Test the fluent assertion interface for league tables."""

    def setUp(self):
        competition = create_played_league(3, points=LeaguePoints(win=2)).build()
        self.group = competition.get_stage_by_id("L").get_group_by_id("RL")

    def test_chained_assertions(self):
        """Assertions chain on one team entry."""
        assert_league(self.group).size(3).order("TM1", "TM2", "TM3")
        assert_league(self.group).team("TM2").position(2).played(2).wins(1).losses(1).draws(
            0
        ).points(2).head_to_head("TM1", -1).head_to_head("TM3", 1)

    def test_assertion_failures(self):
        """Wrong expectations raise AssertionError with a useful message."""
        with self.assertRaises(AssertionError) as cm:
            assert_league(self.group).team("TM1").wins(1)
        self.assertEqual(str(cm.exception), "TM1 expected 1 wins, got 2")

        with self.assertRaises(AssertionError):
            assert_league(self.group).order("TM2", "TM1", "TM3")
        with self.assertRaises(AssertionError):
            assert_league(self.group).size(4)
        with self.assertRaises(AssertionError):
            assert_league(self.group).team("TM1").head_to_head("TM9", 0)

    def test_nonexistent_team(self):
        with self.assertRaises(AssertionError) as cm:
            assert_league(self.group).team("TM9")
        self.assertEqual(str(cm.exception), "Team 'TM9' not found in league table")


class TestKnockoutAssertions(unittest.TestCase):

    def test_knockout_assertion_failures(self):
        competition = (
            create_teams(2)
            .stage("KO")
            .knockout("CUP", standing=[("1st", "{KO:CUP:FIN:winner}"), ("2nd", "{KO:CUP:FIN:loser}")])
            .match("FIN", "TM1", "TM2", "25-20", "25-20", "25-20")
            .build()
        )
        group = competition.get_stage_by_id("KO").get_group_by_id("CUP")

        assert_knockout(group).size(2).position("1st", "TM1").position("2nd", "TM2")
        with self.assertRaises(AssertionError):
            assert_knockout(group).position("1st", "TM2")
        with self.assertRaises(AssertionError):
            assert_knockout(group).undecided("1st")
        with self.assertRaises(AssertionError):
            assert_knockout(group).position("3rd", "TM1")

    def test_league_assertion_needs_league(self):
        competition = create_teams(2).stage("KO").knockout("CUP").match("F", "TM1", "TM2").build()
        with self.assertRaises(AssertionError):
            assert_league(competition.get_stage_by_id("KO").get_group_by_id("CUP"))


if __name__ == "__main__":
    unittest.main()
