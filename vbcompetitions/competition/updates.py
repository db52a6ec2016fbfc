"""
File level operations on a directory of competition documents.
"""

import json
import logging
import os
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass, field

from vbcompetitions.competition.document import load_competition, save_competition
from vbcompetitions.competition_core.exceptions import CompetitionError, DocumentError
from vbcompetitions.competition_core.identifiers import MAX_ID_LENGTH, MAX_NAME_LENGTH
from vbcompetitions.competition_core.results import assert_scores_are_integers

logger = logging.getLogger(__name__)


@dataclass
class UpdateResult:
    """The outcome of update_match_results."""

    updated: bool
    message: str


@dataclass
class CompetitionSummary:
    """One competition file in a data directory."""

    file: str
    is_valid: bool
    name: Optional[str] = None
    is_complete: Optional[bool] = None
    metadata: Dict[str, str] = field(default_factory=dict)
    error_message: Optional[str] = None


def _competition_path(data_dir: str, file: str) -> str:
    if not file or os.path.basename(file) != file:
        raise DocumentError(f'Invalid competition file name "{file}"')
    return os.path.join(data_dir, file)


def update_match_results(
    data_dir: str,
    file: str,
    stage_id: str,
    group_id: str,
    match_id: str,
    home_scores: Sequence[int],
    away_scores: Sequence[int],
    complete: Optional[bool] = None,
) -> UpdateResult:
    """
    Update the scores of one match in a competition file.

    The whole competition is loaded and checked, so the new scores must be
    valid for the match and the file must be valid before the update. On any
    failure the file is left unchanged.

    Args:
        data_dir: The directory containing the competition file
        file: The competition file name within data_dir
        stage_id: The ID of the stage containing the match
        group_id: The ID of the group containing the match
        match_id: The ID of the match to update
        home_scores: The new home team scores
        away_scores: The new away team scores
        complete: Whether the match is complete. Required for continuous
            matches and for matches with a duration.

    Returns:
        UpdateResult with updated=True, or updated=False and the error message
    """
    try:
        assert_scores_are_integers(list(home_scores), list(away_scores))
        path = _competition_path(data_dir, file)
        competition = load_competition(path)
        match = (
            competition.get_stage_by_id(stage_id).get_group_by_id(group_id).get_match(match_id)
        )
        match.set_scores(home_scores, away_scores, complete)
        save_competition(competition, path)
    except CompetitionError as err:
        logger.info("Result update for %s in %s rejected: %s", match_id, file, err)
        return UpdateResult(updated=False, message=str(err))

    logger.info("Updated result for match %s in %s", match.label, file)
    return UpdateResult(updated=True, message=f"Match {match.label} updated")


def _check_metadata_filter(metadata: Dict[str, str]):
    for key, value in metadata.items():
        if not 1 <= len(key) <= MAX_ID_LENGTH:
            raise DocumentError(
                f'Invalid metadata search key "{key}": must be between 1 and {MAX_ID_LENGTH} characters long'
            )
        if not 1 <= len(value) <= MAX_NAME_LENGTH:
            raise DocumentError(
                f'Invalid metadata search value "{value}": must be between 1 and {MAX_NAME_LENGTH} '
                "characters long"
            )


def _metadata_matches(path: str, metadata: Dict[str, str]) -> bool:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        logger.warning("Skipping unreadable competition file %s", path)
        return False
    if not isinstance(data, dict):
        return False
    file_metadata = {
        item.get("key"): item.get("value")
        for item in data.get("metadata") or []
        if isinstance(item, dict)
    }
    return all(file_metadata.get(key) == value for key, value in metadata.items())


def competition_list(
    data_dir: str, metadata: Optional[Dict[str, str]] = None
) -> List[CompetitionSummary]:
    """
    Summarise every competition file in a directory.

    Args:
        data_dir: The directory to scan for *.json files
        metadata: Only list competitions whose metadata contains all of
            these key/value pairs

    Returns:
        A summary per file, in file name order. Files that fail to load are
        listed as invalid with the error message.
    """
    if metadata:
        _check_metadata_filter(metadata)

    summaries = []
    for file in sorted(os.listdir(data_dir)):
        path = os.path.join(data_dir, file)
        stem, extension = os.path.splitext(file)
        if not os.path.isfile(path) or extension != ".json" or not stem:
            continue
        if metadata and not _metadata_matches(path, metadata):
            continue

        try:
            competition = load_competition(path)
        except CompetitionError as err:
            summaries.append(CompetitionSummary(file=file, is_valid=False, error_message=str(err)))
            continue

        summaries.append(
            CompetitionSummary(
                file=file,
                is_valid=True,
                name=competition.name,
                is_complete=competition.is_complete(),
                metadata=dict(competition.metadata),
            )
        )
    return summaries
