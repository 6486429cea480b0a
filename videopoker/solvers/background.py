"""
Background EV analysis with round-identity guarding.

A full exact analysis takes a noticeable fraction of a second, so a front-end
starts it on a worker thread as soon as a hand is dealt and collects it after
the draw. Only the most recent round's job is live: submitting a new round
cancels the previous job if it has not started, and a finished analysis is
only handed out to a caller asking for the same round_id.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Sequence

from videopoker.engine.game_state import RoundState

from .ev_calculator import EVAnalysis, analyze

logger = logging.getLogger(__name__)


class BackgroundAnalyzer:
    """Runs analyze() off the calling thread, one live round at a time.

    Args:
        max_workers:     Threads in the executor.
        **analyze_kwargs: Extra keyword arguments forwarded to analyze()
                          (e.g. sample_size, workers, cache).
    """

    def __init__(self, max_workers: int = 1, **analyze_kwargs) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ev-analysis"
        )
        self._analyze_kwargs = analyze_kwargs
        self._lock = threading.Lock()
        self._round_id: int | None = None
        self._future: Future | None = None

    @property
    def current_round(self) -> int | None:
        return self._round_id

    def submit(
        self,
        round_id: int,
        hand: Sequence[int],
        bet: int,
        player_choice: Sequence[bool] | None = None,
    ) -> Future:
        """Start analysing ``hand`` for ``round_id``, superseding any earlier round."""
        with self._lock:
            if self._future is not None and not self._future.done():
                if self._future.cancel():
                    logger.debug("Cancelled pending analysis for round %s", self._round_id)
            self._round_id = round_id
            self._future = self._executor.submit(
                analyze,
                tuple(hand),
                bet,
                player_choice,
                round_id=round_id,
                **self._analyze_kwargs,
            )
            return self._future

    def submit_round(
        self,
        state: RoundState,
        player_choice: Sequence[bool] | None = None,
    ) -> Future:
        """submit() using the hand, bet and round_id of a dealt RoundState."""
        if not state.hand:
            raise ValueError("Cannot analyse a round with no hand dealt.")
        return self.submit(state.round_id, state.hand, state.bet, player_choice)

    def result(self, round_id: int, timeout: float | None = None) -> EVAnalysis | None:
        """Wait for the analysis of ``round_id``.

        Returns None when ``round_id`` is not the live round, including when
        a newer round was submitted while waiting. Errors raised by the
        analysis propagate.
        """
        with self._lock:
            if round_id != self._round_id or self._future is None:
                logger.debug("Ignoring request for stale round %s (live: %s)", round_id, self._round_id)
                return None
            future = self._future

        analysis = future.result(timeout=timeout)

        with self._lock:
            if analysis.round_id != self._round_id:
                logger.debug("Discarding analysis for superseded round %s", analysis.round_id)
                return None
        return analysis

    def poll(self, round_id: int) -> EVAnalysis | None:
        """Non-blocking result(): None until the live round's analysis is done."""
        with self._lock:
            future = self._future if round_id == self._round_id else None
        if future is None or not future.done() or future.cancelled():
            return None
        return self.result(round_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> BackgroundAnalyzer:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
