"""
Tests for the competition entity graph: IDs, lookups, mutation rules and
schedule queries.
"""

import unittest

from vbcompetitions.competition_core.builder import CompetitionBuilder
from vbcompetitions.competition_core.exceptions import (
    InvalidIDError,
    NotFoundError,
    StructureError,
)
from vbcompetitions.competition_core.identifiers import validate_id
from vbcompetitions.competition_core.matches import Match, MatchTeam
from vbcompetitions.competition_core.structure import GroupType, MatchSelection, TeamSelection
from vbcompetitions.competition_core.teams import Club, CompetitionTeam, Contact
from vbcompetitions.competition_core.tests.test_utils import HOME_WIN, create_league, create_teams


class IdentifierTests(unittest.TestCase):

    def test_valid_ids(self):
        for value in ["TM1", "a", "x" * 100, "Team A (1)"]:
            with self.subTest(value=value):
                self.assertEqual(validate_id(value), value)

    def test_invalid_ids(self):
        with self.assertRaises(InvalidIDError) as cm:
            validate_id("", "stage")
        self.assertEqual(
            str(cm.exception), "Invalid stage ID: must be between 1 and 100 characters long"
        )
        for value in ["x" * 101, "TM:1", "{TM1}", "TM=1", 'TM"1', "TM?", "café"]:
            with self.subTest(value=value):
                with self.assertRaises(InvalidIDError):
                    validate_id(value)


class CompetitionTests(unittest.TestCase):
    """Teams, clubs, metadata and stages on the competition."""

    def test_duplicate_team(self):
        builder = create_teams(2)
        with self.assertRaises(StructureError) as cm:
            builder.team("TM1", "Another")
        self.assertEqual(str(cm.exception), 'Team with ID "TM1" already exists in the competition')

    def test_team_lookup(self):
        competition = create_teams(2).build()
        self.assertEqual(competition.get_team_by_id("TM2").name, "Team 2")
        self.assertTrue(competition.has_team("TM1"))
        self.assertFalse(competition.has_team("UNKNOWN"))
        with self.assertRaises(NotFoundError) as cm:
            competition.get_team_by_id("TM9")
        self.assertEqual(str(cm.exception), 'Team with ID "TM9" not found')

    def test_team_contacts(self):
        contact = Contact("C1", "Alice", roles=["secretary"], emails=["alice@example.com"])
        team = CompetitionTeam("TM1", "Team 1", contacts=[contact])
        self.assertEqual(team.get_contact_by_id("C1").name, "Alice")
        with self.assertRaises(StructureError):
            team.add_contact(Contact("C1"))
        with self.assertRaises(StructureError):
            CompetitionTeam("TM2", "Team 2", contacts=[Contact("C1"), Contact("C1")])

    def test_club_contacts(self):
        club = Club("C1", "Riverside", contacts=[Contact("CC1", "Carol", roles=["secretary"])])
        self.assertTrue(club.has_contact("CC1"))
        with self.assertRaises(StructureError) as cm:
            club.add_contact(Contact("CC1"))
        self.assertEqual(
            str(cm.exception), "club contacts with duplicate IDs within a club not allowed"
        )

        club.add_contact(Contact("CC2", roles=["treasurer"]))
        club.delete_contact("CC1")
        self.assertEqual([contact.id for contact in club.contacts], ["CC2"])
        with self.assertRaises(NotFoundError):
            club.get_contact_by_id("CC1")

    def test_clubs(self):
        builder = CompetitionBuilder().club("C1", "Riverside").team("TM1", club_id="C1").team("TM2")
        competition = builder.build()

        self.assertEqual([team.id for team in competition.get_club_teams("C1")], ["TM1"])
        with self.assertRaises(StructureError) as cm:
            competition.add_club(Club("C1", "Again"))
        self.assertEqual(str(cm.exception), 'Club with ID "C1" already exists in the competition')
        with self.assertRaises(StructureError) as cm:
            competition.add_team(CompetitionTeam("TM3", "Team 3", club_id="C9"))
        self.assertEqual(str(cm.exception), 'No club with ID "C9" exists')

    def test_delete_club_with_teams(self):
        competition = CompetitionBuilder().club("C1", "Riverside").team("TM1", club_id="C1").build()
        with self.assertRaises(StructureError) as cm:
            competition.delete_club("C1")
        self.assertEqual(str(cm.exception), "Club still contains teams with IDs: {TM1}")

        competition.delete_team("TM1")
        competition.delete_club("C1")
        self.assertFalse(competition.has_club("C1"))
        with self.assertRaises(NotFoundError):
            competition.get_club_by_id("C1")

    def test_metadata(self):
        competition = CompetitionBuilder().metadata("season", "2024").build()
        self.assertTrue(competition.has_metadata("season"))
        self.assertEqual(competition.get_metadata("season"), "2024")
        self.assertIsNone(competition.get_metadata("region"))

        with self.assertRaises(InvalidIDError) as cm:
            competition.set_metadata("k" * 101, "value")
        self.assertEqual(
            str(cm.exception), "Invalid metadata key: must be between 1 and 100 characters long"
        )
        with self.assertRaises(InvalidIDError):
            competition.set_metadata("season", "")

        competition.delete_metadata("season")
        self.assertFalse(competition.has_metadata("season"))

    def test_delete_team(self):
        competition = create_league(4).match("M1", "TM1", "TM2", officials="TM3").build()

        with self.assertRaises(StructureError) as cm:
            competition.delete_team("TM1")
        self.assertEqual(str(cm.exception), "Team still has matches with IDs: {L:RL:M1}")
        with self.assertRaises(StructureError):
            competition.delete_team("TM3")

        competition.delete_team("TM4")
        self.assertFalse(competition.has_team("TM4"))
        # Deleting a missing team is a no-op
        competition.delete_team("TM4")

    def test_stages(self):
        builder = create_league(2).match("M1", "TM1", "TM2")
        with self.assertRaises(StructureError) as cm:
            builder.stage("L")
        self.assertEqual(str(cm.exception), 'Stage with ID "L" already exists in the competition')

        competition = builder.build()
        with self.assertRaises(NotFoundError) as cm:
            competition.get_stage_by_id("X")
        self.assertEqual(str(cm.exception), "Stage with ID X not found")

    def test_delete_referenced_stage(self):
        competition = (
            create_league(2)
            .match("RLM1", "TM1", "TM2")
            .stage("F")
            .crossover("FC")
            .match("FM1", "{L:RL:RLM1:winner}", "{L:RL:RLM1:loser}")
            .build()
        )
        with self.assertRaises(StructureError) as cm:
            competition.delete_stage("L")
        self.assertEqual(
            str(cm.exception), 'Cannot delete stage with id "L" as it is referenced in match {F:FC:FM1}'
        )

        competition.delete_stage("F")
        competition.delete_stage("L")
        self.assertEqual(competition.stages, [])

    def test_competition_complete(self):
        competition = create_league(2).match("M1", "TM1", "TM2").build()
        self.assertFalse(competition.is_complete())
        competition.get_stage_by_id("L").get_group_by_id("RL").get_match("M1").set_scores(
            [25, 25, 25], [20, 20, 20]
        )
        self.assertTrue(competition.is_complete())


class GroupRuleTests(unittest.TestCase):
    """Rules checked while adding groups and matches."""

    def test_duplicate_match(self):
        builder = create_league(2).match("M1", "TM1", "TM2")
        with self.assertRaises(StructureError) as cm:
            builder.match("M1", "TM2", "TM1")
        self.assertEqual(str(cm.exception), "Group {L:RL}: matches with duplicate IDs {M1} not allowed")

    def test_duplicate_group(self):
        builder = create_league(2)
        with self.assertRaises(StructureError) as cm:
            builder.league("RL")
        self.assertEqual(
            str(cm.exception),
            "Competition data failed validation. Groups in a Stage with duplicate IDs not allowed: {L:RL}",
        )

    def test_continuous_match_needs_completeness(self):
        competition = create_league(2, continuous=True).build()
        group = competition.get_stage_by_id("L").get_group_by_id("RL")
        with self.assertRaises(StructureError) as cm:
            group.add_match(Match("M1", MatchTeam("TM1"), MatchTeam("TM2")))
        self.assertEqual(str(cm.exception), 'Group {L:RL}, match ID {M1}, missing field "complete"')

    def test_officials_cannot_play(self):
        builder = create_league(2)
        with self.assertRaises(StructureError) as cm:
            builder.match("M1", "TM1", "TM2", officials="TM1")
        self.assertEqual(
            str(cm.exception),
            "Refereeing team (in match {L:RL:M1}) cannot be the same as one of the playing teams",
        )
        group = builder.current_group
        self.assertFalse(group.has_match("M1"))

    def test_team_cannot_play_itself(self):
        builder = create_league(2)
        with self.assertRaises(StructureError) as cm:
            builder.match("M1", "TM1", "TM1", *HOME_WIN)
        self.assertEqual(
            str(cm.exception), "Home and away teams (in match {L:RL:M1}) cannot be the same team"
        )
        self.assertFalse(builder.current_group.has_match("M1"))

    def test_resolved_teams_cannot_clash(self):
        """References are compared by the team they resolve to once it is known."""
        builder = (
            create_league(3)
            .match("RLM1", "TM1", "TM2", *HOME_WIN)
            .match("RLM2", "TM2", "TM3")
            .stage("F")
            .crossover("FC")
        )
        with self.assertRaises(StructureError) as cm:
            builder.match("FM1", "{L:RL:RLM1:winner}", "TM1")
        self.assertEqual(
            str(cm.exception),
            'Home and away teams (in match {F:FC:FM1}) both resolve to team "TM1"',
        )
        with self.assertRaises(StructureError) as cm:
            builder.match("FM1", "TM2", "TM3", officials="{L:RL:RLM1:loser}")
        self.assertEqual(
            str(cm.exception),
            "Refereeing team (in match {F:FC:FM1}) cannot be the same as one of the playing teams",
        )
        self.assertFalse(builder.current_group.has_match("FM1"))

        builder.match("FM1", "{L:RL:RLM1:winner}", "{L:RL:RLM1:loser}", officials="TM3")
        # The league is not finished, so its positions are not compared yet
        builder.match("FM2", "{L:RL:league:1}", "TM1")
        self.assertTrue(builder.current_group.has_match("FM2"))

    def test_groups_in_a_stage_cannot_share_teams(self):
        builder = (
            create_teams(3)
            .stage("L")
            .league("A")
            .match("M1", "TM1", "TM2")
            .league("B")
            .match("M1", "TM2", "TM3")
        )
        with self.assertRaises(StructureError) as cm:
            builder.build()
        self.assertEqual(
            str(cm.exception),
            "Groups in the same stage cannot contain the same team. "
            'Groups {L:A} and {L:B} both contain the following team IDs: "TM2"',
        )

    def test_invalid_match_details(self):
        builder = create_league(2)
        with self.assertRaises(StructureError) as cm:
            builder.match("M1", "TM1", "TM2", date="2024-02-30")
        self.assertEqual(str(cm.exception), 'Invalid date "2024-02-30": date does not exist')
        with self.assertRaises(StructureError):
            builder.match("M1", "TM1", "TM2", start="25:00")
        with self.assertRaises(StructureError):
            builder.match("M1", "TM1", "TM2", duration="1h")

    def test_missing_lookups(self):
        competition = create_league(2).match("M1", "TM1", "TM2").build()
        stage = competition.get_stage_by_id("L")
        with self.assertRaises(NotFoundError) as cm:
            stage.get_group_by_id("XX")
        self.assertEqual(str(cm.exception), "Group with ID XX not found in stage with ID L")
        with self.assertRaises(NotFoundError) as cm:
            stage.get_group_by_id("RL").get_match("M9")
        self.assertEqual(str(cm.exception), "Match with ID M9 not found")

    def test_if_unknown_block(self):
        """The placeholder block accepts free-form team names."""
        competition = (
            create_league(2)
            .match("RLM1", "TM1", "TM2")
            .stage("F")
            .crossover("FC")
            .match("FM1", "{L:RL:RLM1:winner}", "{L:RL:RLM1:loser}")
            .if_unknown("The final is played by the two league teams")
            .build()
        )
        stage = competition.get_stage_by_id("F")
        block = stage.if_unknown
        block.add_match(Match("UM1", MatchTeam("1st"), MatchTeam("2nd"), court="1"))

        self.assertEqual(block.type, GroupType.IF_UNKNOWN)
        self.assertEqual(block.description, ["The final is played by the two league teams"])
        self.assertEqual(block.get_team_ids(TeamSelection.PLAYING), ["1st", "2nd"])
        self.assertFalse(stage.has_group("unknown"))


class ScheduleQueryTests(unittest.TestCase):
    """Match, team and date queries on groups and stages."""

    def setUp(self):
        self.competition = (
            create_league(4)
            .match("M1", "TM1", "TM2", *HOME_WIN, date="2024-06-01", start="10:00", court="1")
            .match("M2", "TM3", "TM4", date="2024-06-01", start="09:00", court="2")
            .break_("Lunch", date="2024-06-01", start="12:00")
            .match("M3", "TM1", "TM3", date="2024-06-02", start="10:00", officials="TM2")
            .build()
        )
        self.stage = self.competition.get_stage_by_id("L")
        self.group = self.stage.get_group_by_id("RL")

    def ids(self, entries):
        return [entry.id for entry in entries]

    def test_get_matches(self):
        self.assertEqual(len(self.group.get_matches()), 4)
        self.assertEqual(len(self.group.breaks), 1)
        self.assertEqual(self.ids(self.group.get_matches("TM1", MatchSelection.PLAYING)), ["M1", "M3"])
        self.assertEqual(self.ids(self.group.get_matches("TM2", MatchSelection.OFFICIATING)), ["M3"])
        self.assertEqual(
            self.ids(
                self.group.get_matches("TM2", MatchSelection.PLAYING | MatchSelection.OFFICIATING)
            ),
            ["M1", "M3"],
        )
        self.assertEqual(len(self.group.get_matches("UNKNOWN", MatchSelection.PLAYING)), 4)

    def test_stage_matches_are_in_date_order(self):
        self.assertEqual(self.ids(self.stage.get_matches()), ["M2", "M1", "M3"])

    def test_match_dates(self):
        self.assertEqual(self.group.get_match_dates(), ["2024-06-01", "2024-06-02"])
        self.assertEqual(self.group.get_match_dates("TM4"), ["2024-06-01"])
        self.assertEqual(self.stage.get_match_dates("TM2", MatchSelection.OFFICIATING), ["2024-06-02"])

    def test_matches_on_date(self):
        entries = self.group.get_matches_on_date("2024-06-01")
        self.assertEqual([entry.start for entry in entries], ["09:00", "10:00", "12:00"])
        self.assertEqual(self.ids(self.stage.get_matches_on_date("2024-06-01")), ["M2", "M1"])
        self.assertEqual(
            self.ids(self.stage.get_matches_on_date("2024-06-01", "TM4", MatchSelection.PLAYING)),
            ["M2"],
        )

    def test_matches_have(self):
        self.assertTrue(self.group.matches_have("court"))
        self.assertTrue(self.group.matches_have("officials"))
        self.assertFalse(self.group.matches_have("venue"))
        self.assertFalse(self.stage.matches_have("manager"))

    def test_team_queries(self):
        self.assertTrue(self.stage.team_has_matches("TM4"))
        self.assertFalse(self.stage.team_has_officiating("TM4"))
        self.assertTrue(self.stage.team_has_officiating("TM2"))
        self.assertEqual(self.stage.get_team_ids(), ["TM1", "TM2", "TM3", "TM4"])
        self.assertEqual(
            self.group.get_team_ids(TeamSelection.OFFICIATING), ["TM2"]
        )
        self.assertFalse(self.stage.team_may_have_matches("TM1"))

    def test_completeness(self):
        self.assertTrue(self.group.get_match("M1").is_complete())
        self.assertFalse(self.group.is_complete())
        self.assertFalse(self.stage.is_complete())


if __name__ == "__main__":
    unittest.main()
