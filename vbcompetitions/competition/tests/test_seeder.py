"""
Tests for the random competition generator.
"""

import unittest

from vbcompetitions.competition.seeder import (
    SEED_ORDERING,
    generate_league_competition,
    random_match_scores,
)
from vbcompetitions.competition_core.builder import parse_score
from vbcompetitions.competition_core.results import assert_set_scores_valid
from vbcompetitions.competition_core.scoring import DEFAULT_SET_CONFIG


class SeederTests(unittest.TestCase):

    def test_league_with_results(self):
        competition = generate_league_competition(teams=4, results=True, seed=1)
        group = competition.get_stage_by_id("L").get_group_by_id("RL")

        self.assertEqual(len(competition.teams), 4)
        self.assertEqual(len({team.name for team in competition.teams}), 4)
        self.assertEqual(len(group.matches), 6)
        self.assertEqual(group.league_config.ordering, SEED_ORDERING)
        self.assertTrue(competition.is_complete())

        table = group.league_table()
        for entry in table.entries:
            self.assertEqual(entry.played, 3)
            self.assertEqual(entry.wins + entry.losses, 3)

    def test_league_without_results(self):
        competition = generate_league_competition(teams=3, name="Quiet League")

        self.assertEqual(competition.name, "Quiet League")
        self.assertFalse(competition.is_complete())
        group = competition.get_stage_by_id("L").get_group_by_id("RL")
        self.assertEqual([match.id for match in group.matches], ["RLM1", "RLM2", "RLM3"])

    def test_seed_is_repeatable(self):
        first = generate_league_competition(teams=4, results=True, seed=7)
        second = generate_league_competition(teams=4, results=True, seed=7)

        self.assertEqual(
            [team.name for team in first.teams], [team.name for team in second.teams]
        )
        first_scores = [m.get_home_team_scores() for m in first.stages[0].groups[0].matches]
        second_scores = [m.get_home_team_scores() for m in second.stages[0].groups[0].matches]
        self.assertEqual(first_scores, second_scores)

    def test_random_match_scores_are_valid(self):
        for _ in range(20):
            scores = [parse_score(score) for score in random_match_scores()]
            home = [h for h, _ in scores]
            away = [a for _, a in scores]
            assert_set_scores_valid(home, away, DEFAULT_SET_CONFIG)
            self.assertIn(3, (sum(h > a for h, a in scores), sum(a > h for h, a in scores)))

    def test_too_few_teams(self):
        with self.assertRaises(ValueError):
            generate_league_competition(teams=1)


if __name__ == "__main__":
    unittest.main()
