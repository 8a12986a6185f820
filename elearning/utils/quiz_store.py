"""
In-memory quiz session store with timer-based expiry
"""
import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Set

logger = logging.getLogger(__name__)


class QuizSessionStore:
    """
    Holds generated quizzes between generation and later grading/hint calls

    Sessions live only in this process. Each session expires `ttl_seconds`
    after creation; the first grading adds a second expiry `review_ttl_seconds`
    later without cancelling the first one, so whichever fires first wins.
    Expiry timers are asyncio handles scheduled on the running event loop and
    cancelled on explicit deletion.
    """

    def __init__(self, ttl_seconds: float = 1800, review_ttl_seconds: float = 900):
        self.ttl_seconds = ttl_seconds
        self.review_ttl_seconds = review_ttl_seconds

        self._sessions: Dict[str, List[Dict[str, Any]]] = {}
        self._timers: Dict[str, List[asyncio.TimerHandle]] = {}
        self._graded: Set[str] = set()
        self._last_id = 0

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, quiz_id: str) -> bool:
        return quiz_id in self._sessions

    def _new_id(self) -> str:
        """Millisecond timestamp, bumped when two sessions share a millisecond"""
        candidate = int(time.time() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def _schedule_expiry(self, quiz_id: str, delay: float, reason: str) -> None:
        loop = asyncio.get_running_loop()
        handle = loop.call_later(delay, self._expire, quiz_id, reason)
        self._timers.setdefault(quiz_id, []).append(handle)

    def _expire(self, quiz_id: str, reason: str) -> None:
        if self.delete(quiz_id):
            logger.info(f"Quiz {quiz_id} {reason} and removed from memory")

    def create(self, content: List[Dict[str, Any]]) -> str:
        """
        Store quiz content under a fresh identifier

        Must be called from inside a running event loop.

        Returns:
            The new quiz identifier
        """
        quiz_id = self._new_id()
        self._schedule_expiry(quiz_id, self.ttl_seconds, "expired")
        self._sessions[quiz_id] = content

        logger.info(f"Quiz {quiz_id} stored ({len(content)} questions, TTL: {self.ttl_seconds}s)")
        return quiz_id

    def get(self, quiz_id: str) -> Optional[List[Dict[str, Any]]]:
        """Look up quiz content; None when unknown or expired"""
        return self._sessions.get(quiz_id)

    def delete(self, quiz_id: str) -> bool:
        """Remove a session and cancel its timers; returns whether it existed"""
        existed = self._sessions.pop(quiz_id, None) is not None
        for handle in self._timers.pop(quiz_id, []):
            handle.cancel()
        self._graded.discard(quiz_id)
        return existed

    def mark_graded(self, quiz_id: str) -> bool:
        """
        Record a grading access

        The first grading of an existing session schedules the review expiry.
        Returns whether a new timer was scheduled.
        """
        if quiz_id not in self._sessions or quiz_id in self._graded:
            return False

        self._graded.add(quiz_id)
        self._schedule_expiry(quiz_id, self.review_ttl_seconds, "completed")
        logger.info(f"Quiz {quiz_id} graded, review period {self.review_ttl_seconds}s")
        return True

    def clear(self) -> None:
        """Drop every session and cancel all pending timers"""
        for quiz_id in list(self._sessions):
            self.delete(quiz_id)
        logger.info("Quiz session store cleared")
