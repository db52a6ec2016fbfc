"""
Tests for updating results in, and listing, competition files.
"""

import os
import tempfile
import unittest

from vbcompetitions.competition.document import load_competition
from vbcompetitions.competition.tests.test_utils import league_document, write_document
from vbcompetitions.competition.updates import competition_list, update_match_results
from vbcompetitions.competition_core.exceptions import DocumentError


class UpdateMatchResultsTests(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.data_dir = self.temp_dir.name
        self.path = write_document(self.data_dir)

    def tearDown(self):
        self.temp_dir.cleanup()

    def read(self):
        with open(self.path, encoding="utf-8") as f:
            return f.read()

    def update(self, match_id, home, away, complete=None, stage_id="L", group_id="RL", file="summer.json"):
        return update_match_results(
            self.data_dir, file, stage_id, group_id, match_id, home, away, complete
        )

    def test_update_saves_scores(self):
        result = self.update("RLM2", [25, 25, 25], [20, 20, 20])

        self.assertTrue(result.updated)
        self.assertEqual(result.message, "Match {L:RL:RLM2} updated")
        competition = load_competition(self.path)
        match = competition.get_stage_by_id("L").get_group_by_id("RL").get_match("RLM2")
        self.assertEqual(match.get_home_team_scores(), [25, 25, 25])
        self.assertTrue(match.is_complete())

    def test_continuous_update_with_completeness(self):
        result = self.update("FM1", [21], [18], complete=True, stage_id="F", group_id="FIN")
        self.assertTrue(result.updated)

        competition = load_competition(self.path)
        final = competition.get_stage_by_id("F").get_group_by_id("FIN")
        self.assertEqual(final.get_match("FM1").get_winner_team_id(), "{L:RL:league:1}")
        self.assertTrue(final.get_match("FM1").is_complete())

    def test_rejected_updates_leave_file_unchanged(self):
        original = self.read()
        cases = [
            (
                ("RLM2", [25, 25, 26], [20, 20, 20]),
                {},
                "more points than necessary",
            ),
            (
                ("RLM9", [25], [20]),
                {},
                "Match with ID RLM9 not found",
            ),
            (
                ("RLM2", [25, "25"], [20, 20]),
                {},
                "Invalid results: found a non-integer home team score value",
            ),
            (
                ("FM1", [21], [18]),
                {"stage_id": "F", "group_id": "FIN"},
                "Invalid score: match type is continuous, but the match completeness is not set",
            ),
            (
                ("RLM2", [25], [20]),
                {"group_id": "XX"},
                "Group with ID XX not found in stage with ID L",
            ),
        ]
        for args, kwargs, message in cases:
            with self.subTest(message=message):
                result = self.update(*args, **kwargs)
                self.assertFalse(result.updated)
                self.assertIn(message, result.message)
                self.assertEqual(self.read(), original)

    def test_invalid_file_names(self):
        result = self.update("RLM2", [25], [20], file="../summer.json")
        self.assertFalse(result.updated)
        self.assertEqual(result.message, 'Invalid competition file name "../summer.json"')

        result = self.update("RLM2", [25], [20], file="missing.json")
        self.assertFalse(result.updated)
        self.assertEqual(result.message, "Failed to load file")

    def test_invalid_file_is_not_updated(self):
        data = league_document()
        data["stages"][0]["groups"][0]["matches"][0]["homeTeam"]["id"] = "TM9"
        write_document(self.data_dir, data=data)

        result = self.update("RLM2", [25, 25, 25], [20, 20, 20])
        self.assertFalse(result.updated)
        self.assertEqual(result.message, 'Invalid team ID for homeTeam in match with ID "RLM1"')


class CompetitionListTests(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.data_dir = self.temp_dir.name
        write_document(self.data_dir, "summer.json")
        write_document(self.data_dir, "broken.json", data="{")
        write_document(self.data_dir, "notes.txt", data="not a competition")
        os.mkdir(os.path.join(self.data_dir, "archive.json"))

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_lists_json_files(self):
        summaries = competition_list(self.data_dir)

        self.assertEqual([summary.file for summary in summaries], ["broken.json", "summer.json"])
        broken, summer = summaries
        self.assertFalse(broken.is_valid)
        self.assertEqual(broken.error_message, "Document does not contain valid JSON")
        self.assertTrue(summer.is_valid)
        self.assertEqual(summer.name, "Summer League")
        self.assertFalse(summer.is_complete)
        self.assertEqual(summer.metadata, {"season": "2024"})

    def test_metadata_filter(self):
        summaries = competition_list(self.data_dir, {"season": "2024"})
        self.assertEqual([summary.file for summary in summaries], ["summer.json"])
        self.assertEqual(competition_list(self.data_dir, {"season": "2023"}), [])

    def test_invalid_metadata_filter(self):
        with self.assertRaises(DocumentError) as cm:
            competition_list(self.data_dir, {"": "2024"})
        self.assertEqual(
            str(cm.exception),
            'Invalid metadata search key "": must be between 1 and 100 characters long',
        )
        with self.assertRaises(DocumentError):
            competition_list(self.data_dir, {"season": "x" * 1001})


if __name__ == "__main__":
    unittest.main()
