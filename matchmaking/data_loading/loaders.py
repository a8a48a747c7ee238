"""
Snapshot loading for the matching runner.

Participants arrive as a JSON export of decrypted questionnaire responses.
No scoring or validation against the question catalog happens here; the
engine validates every response before it scores anything.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from ..schema import Participant

logger = logging.getLogger(__name__)


def load_snapshot(filepath: str) -> List[Participant]:
    """
    Load a participant snapshot from JSON.

    The file holds either {"participants": [...]} or a bare list of
    participant objects.

    Args:
        filepath: Path to the snapshot file

    Returns:
        List of Participant objects in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not valid JSON or has the wrong layout
        MalformedInputError: If a participant record is malformed
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {filepath}")

    logger.info(f"Loading participant snapshot from {filepath}")
    with open(filepath, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Snapshot file is not valid JSON: {filepath}: {e}")

    records = data.get("participants") if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ValueError(f"Snapshot must contain a list of participants: {filepath}")

    participants = [Participant.from_dict(r) for r in records]
    logger.info(f"Loaded {len(participants)} participants")
    return participants


def save_snapshot(participants: List[Participant], filepath: str) -> None:
    """Write participants to a JSON snapshot readable by load_snapshot."""
    with open(filepath, "w") as f:
        json.dump({"participants": [p.to_dict() for p in participants]}, f, indent=2)
    logger.info(f"Saved {len(participants)} participants to {filepath}")


def participants_frame(participants: List[Participant]) -> pd.DataFrame:
    """
    Flatten participants to one row each for inspection.

    Columns: id, gender, interested_in_genders, n_responses, n_dealbreakers,
    plus one column per question holding the raw answer.
    """
    rows: List[Dict[str, Any]] = []
    for p in participants:
        row = {
            "id": p.id,
            "gender": p.gender,
            "interested_in_genders": ",".join(sorted(p.interested_in_genders)),
            "n_responses": len(p.responses),
            "n_dealbreakers": sum(1 for r in p.responses.values() if r.dealbreaker),
        }
        for qid, response in p.responses.items():
            row[qid] = response.answer
        rows.append(row)
    return pd.DataFrame(rows)
