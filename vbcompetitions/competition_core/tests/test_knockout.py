"""
Tests for knockout brackets and their final standing.
"""

import unittest

from vbcompetitions.competition_core.assertions import assert_knockout
from vbcompetitions.competition_core.exceptions import ScoreError, StructureError
from vbcompetitions.competition_core.tests.test_utils import AWAY_WIN, HOME_WIN, create_teams

STANDING = [
    ("1st", "{KO:CUP:FIN:winner}"),
    ("2nd", "{KO:CUP:FIN:loser}"),
    ("3rd", "{KO:CUP:PO:winner}"),
    ("4th", "{KO:CUP:PO:loser}"),
]


def create_bracket(standing=STANDING, **knockout_kwargs):
    """Semi-finals, a final and a play-off between four teams."""
    return (
        create_teams(4)
        .stage("KO")
        .knockout("CUP", standing=standing, **knockout_kwargs)
        .match("SF1", "TM1", "TM2")
        .match("SF2", "TM3", "TM4")
        .match("FIN", "{KO:CUP:SF1:winner}", "{KO:CUP:SF2:winner}")
        .match("PO", "{KO:CUP:SF1:loser}", "{KO:CUP:SF2:loser}")
    )


class KnockoutStandingTests(unittest.TestCase):

    def test_standing_fills_in_as_bracket_is_played(self):
        """Only positions with a decided match appear in the standing."""
        competition = (
            create_bracket()
            .result("SF1", *HOME_WIN)
            .result("SF2", *AWAY_WIN)
            .result("FIN", *AWAY_WIN)
            .build()
        )
        group = competition.get_stage_by_id("KO").get_group_by_id("CUP")

        assert_knockout(group).size(2).position("1st", "TM4").position("2nd", "TM1")
        assert_knockout(group).undecided("3rd").undecided("4th")
        self.assertFalse(group.is_complete())

        group.get_match("PO").set_scores([25, 25, 25], [20, 20, 20])

        assert_knockout(group).size(4).position("3rd", "TM2").position("4th", "TM3")
        self.assertTrue(group.is_complete())
        self.assertEqual(
            [row.position for row in group.knockout_standing()], ["1st", "2nd", "3rd", "4th"]
        )

    def test_unplayed_bracket_has_empty_standing(self):
        group = create_bracket().build().get_stage_by_id("KO").get_group_by_id("CUP")
        self.assertEqual(group.knockout_standing(), [])

    def test_knockout_without_standing(self):
        competition = (
            create_teams(2)
            .stage("KO")
            .knockout("CUP")
            .match("FIN", "TM1", "TM2", *HOME_WIN)
            .build()
        )
        group = competition.get_stage_by_id("KO").get_group_by_id("CUP")

        self.assertEqual(group.knockout_standing(), [])
        self.assertEqual(group.get_match("FIN").get_winner_team_id(), "TM1")

    def test_invalid_standing_reference(self):
        builder = create_bracket(standing=[("1st", "{KO:CUP:FIN:champion}")])
        with self.assertRaises(StructureError) as cm:
            builder.build()
        self.assertEqual(
            str(cm.exception),
            'Invalid knockout standing reference for position "1st" in group {KO:CUP}: '
            '"{KO:CUP:FIN:champion}"',
        )

    def test_knockouts_do_not_allow_draws(self):
        builder = create_teams(2).stage("KO").knockout("CUP", continuous=True)
        with self.assertRaises(ScoreError):
            builder.match("FIN", "TM1", "TM2", "20-20")

    def test_continuous_knockout(self):
        competition = (
            create_teams(2)
            .stage("KO")
            .knockout("CUP", standing=[("1st", "{KO:CUP:FIN:winner}")], continuous=True)
            .match("FIN", "TM1", "TM2", "19-21")
            .build()
        )
        group = competition.get_stage_by_id("KO").get_group_by_id("CUP")
        assert_knockout(group).size(1).position("1st", "TM2")

    def test_standing_only_for_knockouts(self):
        competition = create_teams(2).stage("L").league("RL").match("M1", "TM1", "TM2").build()
        with self.assertRaises(StructureError):
            competition.get_stage_by_id("L").get_group_by_id("RL").knockout_standing()


if __name__ == "__main__":
    unittest.main()
