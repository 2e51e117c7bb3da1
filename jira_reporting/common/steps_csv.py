"""Helpers for turning CSV test steps into issue descriptions."""

import csv
import logging
from pathlib import Path
from typing import List, Tuple

from ..exceptions import AttachmentError, ValidationError

logger = logging.getLogger(__name__)

HEADER_NAMES = {"step", "test step", "action"}


def read_test_steps(csv_path) -> List[Tuple[str, str]]:
    """Read (step, expected result) pairs from a two-column CSV file.

    A header row is skipped when its first cell looks like a column name.
    Rows with fewer than two cells get an empty expected result.
    """
    path = Path(csv_path)
    if not path.is_file():
        raise AttachmentError(f"Test steps file not found: {path}")

    steps = []
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            for row in csv.reader(fh):
                cells = [cell.strip() for cell in row]
                if not any(cells):
                    continue
                if not steps and cells[0].lower() in HEADER_NAMES:
                    continue
                expected = cells[1] if len(cells) > 1 else ""
                steps.append((cells[0], expected))
    except (OSError, UnicodeDecodeError) as e:
        raise AttachmentError(f"Could not read test steps from {path}: {e}") from e

    if not steps:
        raise ValidationError(f"No test steps found in {path}")

    logger.info(f"Read {len(steps)} test steps from {path}")
    return steps


def format_steps_description(steps: List[Tuple[str, str]]) -> str:
    """Render steps as a Jira wiki-markup table."""
    lines = ["||#||Step||Expected Result||"]
    for number, (step, expected) in enumerate(steps, start=1):
        lines.append(f"|{number}|{_cell(step)}|{_cell(expected)}|")
    return "\n".join(lines)


def _cell(text: str) -> str:
    # Pipes would split the wiki table cell
    return text.replace("|", "\\|") or " "
