"""
Generate random competitions for manual testing and demos.
"""

import random
from itertools import combinations
from typing import List, Optional, Tuple

from faker import Faker

from vbcompetitions.competition_core.builder import CompetitionBuilder
from vbcompetitions.competition_core.scoring import DEFAULT_SET_CONFIG, LeaguePoints, SetConfig
from vbcompetitions.competition_core.structure import Competition

NICKNAMES = [
    "Aces", "Blockers", "Spikers", "Diggers", "Setters", "Smashers",
    "Hawks", "Sharks", "Tigers", "Falcons", "Storm", "Thunder",
    "Lightning", "Rockets", "Volcanoes", "Panthers",
]

SEED_ORDERING = ["PTS", "SD", "PD", "H2H"]
SEED_POINTS = LeaguePoints(win=3, win_by_one=2, lose_by_one=1)


class TeamNameGenerator:
    """Generate unique team names from Faker city names."""

    def __init__(self, fake: Faker):
        self.fake = fake
        self.used_names = set()

    def generate(self) -> str:
        for _ in range(50):
            name = f"{self.fake.city()} {random.choice(NICKNAMES)}"
            if name not in self.used_names:
                self.used_names.add(name)
                return name
        # Fallback
        name = f"Team {len(self.used_names) + 1}"
        self.used_names.add(name)
        return name


def random_set_score(set_index: int, home_wins: bool, config: SetConfig) -> Tuple[int, int]:
    """A complete, valid score for one set."""
    target = config.target_points(set_index)
    losing = random.randint(target // 2, target - config.clear_points)
    if home_wins:
        return target, losing
    return losing, target


def random_match_scores(config: SetConfig = DEFAULT_SET_CONFIG) -> List[str]:
    """Random "home-away" set scores for a complete match."""
    home_sets = away_sets = 0
    scores = []
    set_index = 0
    while home_sets < config.sets_to_win and away_sets < config.sets_to_win:
        home_wins = random.random() < 0.5
        home, away = random_set_score(set_index, home_wins, config)
        scores.append(f"{home}-{away}")
        if home_wins:
            home_sets += 1
        else:
            away_sets += 1
        set_index += 1
    return scores


def generate_league_competition(
    teams: int = 6,
    results: bool = False,
    name: Optional[str] = None,
    seed: Optional[int] = None,
) -> Competition:
    """
    Build a single round-robin league with random team names.

    Args:
        teams: Number of teams, at least 2
        results: Fill every match with a random complete result
        name: Competition name, defaults to a generated one
        seed: Seed for Faker and random, for repeatable output
    """
    if teams < 2:
        raise ValueError("A league needs at least 2 teams")

    fake = Faker()
    if seed is not None:
        Faker.seed(seed)
        random.seed(seed)

    names = TeamNameGenerator(fake)
    builder = CompetitionBuilder(name or f"{fake.city()} Volleyball League")
    team_ids = [f"TM{number}" for number in range(1, teams + 1)]
    for team_id in team_ids:
        builder.team(team_id, names.generate())

    builder.stage("L", name="League").league(
        "RL", name="Round Robin", ordering=SEED_ORDERING, points=SEED_POINTS
    )
    for number, (home, away) in enumerate(combinations(team_ids, 2), start=1):
        scores = random_match_scores() if results else []
        builder.match(f"RLM{number}", home, away, *scores)

    return builder.build()
