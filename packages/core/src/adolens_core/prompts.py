"""Prompt assembly for a multi-file review request."""

from __future__ import annotations

from dataclasses import dataclass

FILE_DELIMITER = "---"
_DEFAULT_MAX_CHARS = 20000


@dataclass(frozen=True)
class FileReviewInput:
    """Everything the model sees about one selected file."""

    path: str
    language: str
    diff: str
    full_text: str


def truncate(text: str, max_chars: int | None, label: str) -> str:
    if max_chars is None or len(text) <= max_chars:
        return text
    return text[:max_chars] + f"\n... [{label} truncated]"


def build_system_prompt() -> str:
    """Reviewer persona, focus areas and the output schema.

    The schema lives here, not in the user prompt, because it is identical for
    every request regardless of which files are selected.
    """
    return """You are an expert code reviewer. Analyze the provided code changes and provide detailed feedback.

Focus on:
- Security vulnerabilities
- Performance issues
- Code quality and maintainability
- Best practices
- Potential bugs

Respond with **only** a valid JSON array, one element per piece of feedback:

[
  {
    "file": "<file path exactly as given in the request>",
    "severity": "<BLOCKER|MAJOR|MINOR|NIT>",
    "message": "<specific, actionable feedback>"
  }
]

Severity guide:
- BLOCKER: security vulnerability, data loss risk, crash; must be fixed before merging
- MAJOR: logic bug, missing error handling, significant performance issue
- MINOR: code smell, unclear naming, maintainability concern
- NIT: style preference, minor formatting

If there are no issues, return: []
Be specific, actionable, and constructive. Do not return any text outside the JSON array."""


def build_file_block(file: FileReviewInput, max_chars: int | None = _DEFAULT_MAX_CHARS) -> str:
    return (
        f"File: {file.path}\n"
        f"Language: {file.language}\n"
        f"Diff:\n{truncate(file.diff, max_chars, 'diff')}\n"
        f"Full Content:\n{truncate(file.full_text, max_chars, 'file')}\n"
        f"{FILE_DELIMITER}\n"
    )


def build_user_prompt(
    files: list[FileReviewInput],
    pr_context: str | None = None,
    max_chars: int | None = _DEFAULT_MAX_CHARS,
) -> str:
    """Assemble the user message: optional PR context, then one block per file.

    Files keep the order they were given in so the same selection always
    produces the same prompt. Diff and full text are each capped at
    ``max_chars`` characters per file.
    """
    parts = []
    if pr_context and pr_context.strip():
        parts.append(f"PR Context:\n{pr_context.strip()}\n")
    parts.append("Please review the following code changes:\n")
    parts.extend(build_file_block(f, max_chars) for f in files)
    parts.append("Please provide a comprehensive code review focusing on security, performance, and code quality.")
    return "\n".join(parts)
