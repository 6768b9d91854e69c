"""Unified diff rendering for before/after file content."""

from __future__ import annotations

import difflib

_NO_NEWLINE = "\\ No newline at end of file\n"


def split_lines(text: str) -> list[str]:
    """Split on "\\n" only, keeping line endings.

    ``str.splitlines`` also breaks on "\\r", form feeds and other separators,
    which would put a no-newline marker in the middle of a hunk.
    """
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    return lines if lines[-1] else lines[:-1]


def _terminate(line: str) -> str:
    # A final line without "\n" would otherwise run into the next diff line.
    if line.endswith("\n"):
        return line
    return line + "\n" + _NO_NEWLINE


def create_patch(
    file_name: str,
    old_content: str,
    new_content: str,
    old_header: str = "",
    new_header: str = "",
) -> str:
    """Return a unified diff of ``old_content`` -> ``new_content``.

    The output always starts with an ``Index:`` banner and ``---``/``+++``
    headers, so a pure addition, a pure deletion and an unchanged file all
    yield a well-formed patch; identical inputs produce headers with no hunks.
    """
    lines = [
        f"Index: {file_name}\n",
        "=" * 67 + "\n",
        f"--- {file_name}" + (f"\t{old_header}" if old_header else "") + "\n",
        f"+++ {file_name}" + (f"\t{new_header}" if new_header else "") + "\n",
    ]
    hunks = list(
        difflib.unified_diff(
            split_lines(old_content),
            split_lines(new_content),
        )
    )
    # difflib's own ---/+++ pair is replaced by the headers above.
    for line in hunks[2:]:
        lines.append(_terminate(line))
    return "".join(lines)


def diff_stats(patch: str) -> tuple[int, int]:
    """Count (added, removed) content lines in a unified diff."""
    added = removed = 0
    in_hunk = False
    for line in patch.split("\n"):
        if line.startswith("@@"):
            in_hunk = True
            continue
        if not in_hunk:
            continue
        if line.startswith("+"):
            added += 1
        elif line.startswith("-"):
            removed += 1
    return added, removed
