"""Diff position mapping — critical for correct GitHub comment placement."""

from __future__ import annotations

import re

_HUNK_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def build_position_map(patch_text: str) -> dict[int, int]:
    """
    Maps new-file line numbers to their GitHub diff positions.

    Position is a 1-based count over every physical line of the patch,
    cumulative across hunks, and the @@ header lines are counted too. Added
    and context lines get an entry; removed lines advance the position only.
    Lines before the first hunk header are never mapped.
    """
    positions: dict[int, int] = {}
    position = 0
    file_line: int | None = None

    for line in patch_text.split("\n"):
        match = _HUNK_RE.match(line)
        if match:
            file_line = int(match.group(1)) - 1
            position += 1
            continue

        position += 1

        if file_line is None:
            continue
        if line.startswith("+") or line.startswith(" "):
            file_line += 1
            positions[file_line] = position
        # "-" lines and "\ No newline at end of file" do not exist in the new file

    return positions
