"""
Helper utility functions for the transcript summarizer.
"""

import os
import json
import time
import tempfile
from typing import Any, Optional
from pathlib import Path

from transcript_summarizer.utils.error_handling import ArtifactFailure, RunTimeout


def save_json(data: Any, filepath: str, pretty: bool = True) -> None:
    """
    Save data to a JSON file.

    The file is written to a temporary sibling first and moved into place, so
    a failed write never leaves a truncated artifact behind.

    Args:
        data: Data to save
        filepath: Path to save the file
        pretty: Whether to format the JSON for readability
    """
    path = Path(filepath)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                if pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
    except (OSError, TypeError, ValueError) as e:
        raise ArtifactFailure(f"Could not write {path}: {e}", operation="save_artifact") from e


def load_json(filepath: str) -> Any:
    """
    Load data from a JSON file.

    Args:
        filepath: Path to the JSON file

    Returns:
        Loaded JSON data

    Raises:
        ArtifactFailure: If the file is missing, unreadable or not valid JSON
    """
    path = Path(filepath)
    if not path.is_file():
        raise ArtifactFailure(f"Artifact not found at {path}")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ArtifactFailure(f"Artifact at {path} is corrupt: {e}") from e


class Deadline:
    """Wall-clock budget for a run, checked between external calls."""

    def __init__(self, seconds: Optional[float] = None, clock=None):
        self.seconds = seconds
        self._clock = clock or time.monotonic
        self._expires_at = self._clock() + seconds if seconds is not None else None

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    def check(self, operation: str = "generate") -> None:
        """Raise RunTimeout if the budget is spent."""
        if self.expired:
            raise RunTimeout(
                f"Run exceeded its {self.seconds}s time budget",
                operation=operation,
            )
