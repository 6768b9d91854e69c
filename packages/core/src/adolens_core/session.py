"""Review session state owned by the presentation layer.

State only changes through ``reduce``; ReviewSession is the single writer
that holds the current state and dispatches actions to it. The progress
value is a cosmetic hint for progress bars: it climbs while the model call
is in flight, stays below 100 until the review finishes, and nothing else
depends on it.

    IDLE ──start──▶ REVIEWING ──finish──▶ DONE
      ▲                                   │
      └────────────── reset ──────────────┘   (DONE ──start──▶ REVIEWING)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from adolens_core.errors import AdolensError
from adolens_core.findings import ReviewFinding, ReviewResult, Severity
from adolens_core.prompts import FileReviewInput

logger = logging.getLogger(__name__)

ERROR_FILE = "error"
PROGRESS_STEP = 10
PROGRESS_CEILING = 90


class ReviewStatus(str, Enum):
    IDLE = "idle"
    REVIEWING = "reviewing"
    DONE = "done"


@dataclass(frozen=True)
class ReviewState:
    status: ReviewStatus = ReviewStatus.IDLE
    reviews: tuple[ReviewFinding, ...] = ()
    progress: int = 0
    last_message: str = ""
    failed: bool = False

    @property
    def is_reviewing(self) -> bool:
        return self.status is ReviewStatus.REVIEWING


@dataclass(frozen=True)
class StartReview:
    pass


@dataclass(frozen=True)
class UpdateProgress:
    value: int


@dataclass(frozen=True)
class FinishReview:
    message: str
    reviews: tuple[ReviewFinding, ...] = ()
    failed: bool = False


@dataclass(frozen=True)
class Reset:
    pass


ReviewAction = Union[StartReview, UpdateProgress, FinishReview, Reset]


def error_finding(message: str) -> ReviewFinding:
    return ReviewFinding(file=ERROR_FILE, severity=Severity.BLOCKER, message=message)


def reduce(state: ReviewState, action: ReviewAction) -> ReviewState:
    if isinstance(action, StartReview):
        # Entering REVIEWING always discards the previous run's findings.
        return ReviewState(status=ReviewStatus.REVIEWING)
    if isinstance(action, UpdateProgress):
        if not state.is_reviewing:
            return state
        progress = max(state.progress, min(action.value, PROGRESS_CEILING))
        return ReviewState(status=state.status, progress=progress)
    if isinstance(action, FinishReview):
        if not state.is_reviewing:
            logger.debug("Ignoring FinishReview outside of a running review")
            return state
        return ReviewState(
            status=ReviewStatus.DONE,
            reviews=tuple(action.reviews),
            progress=100,
            last_message=action.message,
            failed=action.failed,
        )
    if isinstance(action, Reset):
        return ReviewState()
    raise TypeError(f"Unknown review action: {action!r}")


def finish_action(result: ReviewResult) -> FinishReview:
    if result.success:
        return FinishReview(message=result.message, reviews=tuple(result.reviews))
    return FinishReview(message=result.message, reviews=(error_finding(result.message),), failed=True)


ReviewFn = Callable[[list[FileReviewInput], Optional[str]], ReviewResult]


class ReviewSession:
    def __init__(self, poll_interval: float = 0.5):
        self.state = ReviewState()
        self.poll_interval = poll_interval

    def dispatch(self, action: ReviewAction) -> ReviewState:
        self.state = reduce(self.state, action)
        return self.state

    def reset(self) -> ReviewState:
        return self.dispatch(Reset())

    def start(
        self,
        files: list[FileReviewInput],
        pr_context: str | None,
        review_fn: ReviewFn,
        on_update: Callable[[ReviewState], None] | None = None,
    ) -> ReviewState:
        """Run one review to completion and return the final state.

        ``review_fn`` runs on a worker thread while this thread advances the
        progress hint every ``poll_interval`` seconds; only this thread ever
        writes ``self.state``. There is no cancellation.
        """
        if not files:
            raise ValueError("Select at least one file to review")

        self.dispatch(StartReview())
        self._notify(on_update)

        with ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(review_fn, files, pr_context)
            while not wait([future], timeout=self.poll_interval).done:
                self.dispatch(UpdateProgress(self.state.progress + PROGRESS_STEP))
                self._notify(on_update)

        try:
            action = finish_action(future.result())
        except Exception as e:
            # Any failure ends the review; unexpected ones keep their traceback in the log.
            logger.error("Review failed: %s", e, exc_info=not isinstance(e, AdolensError))
            action = FinishReview(
                message="Review failed",
                reviews=(error_finding(f"Review failed: {e}"),),
                failed=True,
            )

        self.dispatch(action)
        self._notify(on_update)
        return self.state

    def _notify(self, on_update: Callable[[ReviewState], None] | None) -> None:
        if on_update is not None:
            on_update(self.state)
