"""Review findings and the decoder for raw model output.

Model output is decoded in two stages. ``decode_review_output`` classifies the
raw text into one of four shapes (array of findings, single finding,
free-form text, empty) without interpreting fields; ``parse_review_chunks``
then turns that shape into ReviewFinding objects with defaults applied.
Neither stage raises: whatever the model returns becomes a list, possibly
empty.
"""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from dataclasses import asdict, dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

_DEFAULT_MESSAGE = "Review feedback"
_UNKNOWN_FILE = "unknown"


class Severity(str, Enum):
    BLOCKER = "BLOCKER"
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    NIT = "NIT"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value) -> Severity:
        """Normalise a model-supplied severity; anything unrecognised is MINOR."""
        key = str(value or "").strip().upper()
        key = _SEVERITY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.MINOR


_SEVERITY_RANK = {Severity.BLOCKER: 3, Severity.MAJOR: 2, Severity.MINOR: 1, Severity.NIT: 0}
_SEVERITY_ALIASES = {"CRITICAL": "BLOCKER", "NITPICK": "NIT"}


@dataclass(frozen=True)
class ReviewFinding:
    file: str
    severity: Severity
    message: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["severity"] = self.severity.value
        return data


class OutputKind(str, Enum):
    FINDINGS = "findings"
    FINDING = "finding"
    TEXT = "text"
    EMPTY = "empty"


@dataclass(frozen=True)
class DecodedOutput:
    kind: OutputKind
    items: list = field(default_factory=list)
    text: str = ""


def _strip_fence(text: str) -> str:
    # Only the outer ```json ... ``` wrapper, never backticks inside values.
    cleaned = re.sub(r"^```(?:json)?\s*", "", text)
    return re.sub(r"\s*```$", "", cleaned)


def decode_review_output(raw: str | None) -> DecodedOutput:
    text = (raw or "").strip()
    if not text:
        return DecodedOutput(OutputKind.EMPTY)

    try:
        parsed = json.loads(_strip_fence(text))
    except json.JSONDecodeError:
        logger.warning("Model response is not JSON; keeping it as a plain-text finding: %s", text[:200])
        return DecodedOutput(OutputKind.TEXT, text=text)

    if isinstance(parsed, list):
        return DecodedOutput(OutputKind.FINDINGS, items=parsed)
    if isinstance(parsed, dict):
        if parsed.get("file") and parsed.get("message"):
            return DecodedOutput(OutputKind.FINDING, items=[parsed])
        # Some models wrap the array in an object despite the instructions.
        for key in ("findings", "reviews"):
            if isinstance(parsed.get(key), list):
                return DecodedOutput(OutputKind.FINDINGS, items=parsed[key])
    logger.warning("Model response is JSON but has no findings shape: %s", text[:200])
    return DecodedOutput(OutputKind.EMPTY)


def _to_finding(item, default_file: str) -> ReviewFinding | None:
    if isinstance(item, str):
        return ReviewFinding(file=default_file, severity=Severity.MINOR, message=item) if item.strip() else None
    if not isinstance(item, dict):
        return None
    return ReviewFinding(
        file=str(item.get("file") or default_file),
        severity=Severity.parse(item.get("severity")),
        message=str(item.get("message") or _DEFAULT_MESSAGE),
    )


def parse_review_chunks(raw: str | None, default_file: str = _UNKNOWN_FILE) -> list[ReviewFinding]:
    """Turn raw model output into findings, in the order the model gave them.

    ``default_file`` (the first reviewed file) is used when a finding has no
    ``file`` and as the target of a plain-text fallback finding.
    """
    decoded = decode_review_output(raw)
    if decoded.kind is OutputKind.EMPTY:
        return []
    if decoded.kind is OutputKind.TEXT:
        return [ReviewFinding(file=default_file, severity=Severity.MINOR, message=decoded.text)]
    findings = (_to_finding(item, default_file) for item in decoded.items)
    return [f for f in findings if f is not None]


def group_by_file(findings: list[ReviewFinding]) -> dict[str, list[ReviewFinding]]:
    """Group findings by file, keeping first-seen file order and in-file order."""
    grouped: dict[str, list[ReviewFinding]] = {}
    for finding in findings:
        grouped.setdefault(finding.file, []).append(finding)
    return grouped


def count_by_severity(findings: list[ReviewFinding]) -> dict[Severity, int]:
    counts = Counter(f.severity for f in findings)
    return {s: counts.get(s, 0) for s in Severity}


@dataclass
class ReviewResult:
    """Outcome of one reviewFiles call, as handed to the presentation layer."""

    success: bool
    message: str
    reviews: list[ReviewFinding] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "reviews": [r.to_dict() for r in self.reviews],
        }
