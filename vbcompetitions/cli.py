"""
Command line interface: vbc <command> [options]

Each sub-command is a small command class with an add_arguments hook and a
handle method, registered in COMMANDS.
"""

import argparse
import logging.config
import os
import sys
from typing import List, Optional

from vbcompetitions import settings
from vbcompetitions.competition.document import load_competition, save_competition
from vbcompetitions.competition.seeder import generate_league_competition
from vbcompetitions.competition.updates import competition_list, update_match_results
from vbcompetitions.competition_core.exceptions import CompetitionError


def parse_scores(value: str) -> List[int]:
    """Parse "25,20,15" into [25, 20, 15]. An empty string is no scores."""
    if value.strip() == "":
        return []
    try:
        return [int(part) for part in value.split(",")]
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"Invalid scores: {value}") from err


def parse_metadata(value: str):
    key, sep, meta_value = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f'Invalid metadata filter "{value}": must be key=value')
    return key, meta_value


class Command:
    """Base class for sub-commands."""

    name = ""
    help = ""

    def __init__(self, stdout=None):
        self.stdout = stdout or sys.stdout

    def write(self, message: str = ""):
        self.stdout.write(message + "\n")

    def add_arguments(self, parser: argparse.ArgumentParser):
        pass

    def handle(self, options: argparse.Namespace) -> int:
        raise NotImplementedError


class ValidateCommand(Command):
    name = "validate"
    help = "Check a competition file, printing every error in the chain"

    def add_arguments(self, parser):
        parser.add_argument("file", help="Competition JSON file")

    def handle(self, options):
        try:
            load_competition(options.file)
        except CompetitionError as err:
            self.write("Errors found in file:")
            error = err
            while error is not None:
                self.write(f"  {error}")
                error = error.__cause__
            return 1
        self.write("File is valid")
        return 0


class UpdateResultCommand(Command):
    name = "update-result"
    help = "Set the scores of a match and save the file"

    def add_arguments(self, parser):
        parser.add_argument("file", help="Competition JSON file")
        parser.add_argument("stage", help="Stage ID")
        parser.add_argument("group", help="Group ID")
        parser.add_argument("match", help="Match ID")
        parser.add_argument(
            "--home", type=parse_scores, required=True, help="Home scores, e.g. 25,20,15"
        )
        parser.add_argument(
            "--away", type=parse_scores, required=True, help="Away scores, e.g. 20,25,10"
        )
        completeness = parser.add_mutually_exclusive_group()
        completeness.add_argument(
            "--complete", dest="complete", action="store_true", default=None,
            help="Mark the match as complete",
        )
        completeness.add_argument(
            "--incomplete", dest="complete", action="store_false",
            help="Mark the match as incomplete",
        )

    def handle(self, options):
        data_dir, file = os.path.split(os.path.abspath(options.file))
        result = update_match_results(
            data_dir,
            file,
            options.stage,
            options.group,
            options.match,
            options.home,
            options.away,
            options.complete,
        )
        self.write(result.message)
        return 0 if result.updated else 1


class ListCommand(Command):
    name = "list"
    help = "List the competitions in a directory"

    def add_arguments(self, parser):
        parser.add_argument(
            "directory", nargs="?", default=None,
            help=f"Directory of competition files (default: {settings.DATA_DIR})",
        )
        parser.add_argument(
            "--metadata", type=parse_metadata, action="append", default=[],
            help="Only list competitions with this metadata, as key=value",
        )

    def handle(self, options):
        metadata = dict(options.metadata) or None
        try:
            summaries = competition_list(options.directory or settings.DATA_DIR, metadata)
        except CompetitionError as err:
            self.write(str(err))
            return 1
        for summary in summaries:
            if summary.is_valid:
                state = "complete" if summary.is_complete else "in progress"
                self.write(f"{summary.file}: {summary.name} ({state})")
            else:
                self.write(f"{summary.file}: INVALID - {summary.error_message}")
        return 0


class TableCommand(Command):
    name = "table"
    help = "Print the league table for a group"

    def add_arguments(self, parser):
        parser.add_argument("file", help="Competition JSON file")
        parser.add_argument("stage", help="Stage ID")
        parser.add_argument("group", help="Group ID")

    def handle(self, options):
        try:
            competition = load_competition(options.file)
            group = competition.get_stage_by_id(options.stage).get_group_by_id(options.group)
            table = group.league_table()
        except CompetitionError as err:
            self.write(str(err))
            return 1

        header = f"{'Pos':>3}  {'Team':<30} {'P':>3} {'W':>3} {'L':>3}"
        if table.has_draws:
            header += f" {'D':>3}"
        if table.has_sets:
            header += f" {'SF':>4} {'SA':>4}"
        header += f" {'PF':>5} {'PA':>5} {'Pts':>4}"
        self.write(header)
        for position, entry in enumerate(table.entries, start=1):
            line = f"{position:>3}  {entry.name[:30]:<30} {entry.played:>3} {entry.wins:>3} {entry.losses:>3}"
            if table.has_draws:
                line += f" {entry.draws:>3}"
            if table.has_sets:
                line += f" {entry.sets_for:>4} {entry.sets_against:>4}"
            line += f" {entry.points_for:>5} {entry.points_against:>5} {entry.league_points:>4}"
            self.write(line)
        self.write()
        self.write(table.ordering_text())
        scoring = table.scoring_text()
        if scoring:
            self.write(scoring)
        return 0


class SeedCommand(Command):
    name = "seed"
    help = "Write a random round-robin league competition"

    def add_arguments(self, parser):
        parser.add_argument("file", help="Competition JSON file to write")
        parser.add_argument(
            "--teams", type=int, default=6, help="Number of teams (default: 6)"
        )
        parser.add_argument(
            "--results", action="store_true", help="Fill in random results for every match"
        )
        parser.add_argument("--name", type=str, default=None, help="Competition name")
        parser.add_argument("--seed", type=int, default=None, help="Random seed")

    def handle(self, options):
        try:
            competition = generate_league_competition(
                teams=options.teams, results=options.results, name=options.name, seed=options.seed
            )
            save_competition(competition, options.file)
        except (ValueError, CompetitionError) as err:
            self.write(str(err))
            return 1
        match_count = len(competition.stages[0].groups[0].matches)
        self.write(f"Created {competition.name} in {options.file}")
        self.write(f"  - {len(competition.teams)} teams")
        self.write(f"  - {match_count} matches")
        return 0


COMMANDS = [ValidateCommand, UpdateResultCommand, ListCommand, TableCommand, SeedCommand]


def build_parser(stdout=None):
    parser = argparse.ArgumentParser(prog="vbc", description="Volleyball competition tools")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for command_class in COMMANDS:
        command = command_class(stdout)
        subparser = subparsers.add_parser(command.name, help=command.help)
        command.add_arguments(subparser)
        subparser.set_defaults(handler=command)
    return parser


def main(argv: Optional[List[str]] = None, stdout=None) -> int:
    logging.config.dictConfig(settings.LOGGING)
    options = build_parser(stdout).parse_args(argv)
    return options.handler.handle(options)


if __name__ == "__main__":
    sys.exit(main())
