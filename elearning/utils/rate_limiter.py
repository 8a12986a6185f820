"""
Per-client request throttling
"""
import time
from collections import deque
from typing import Deque, Dict, Tuple
import logging

import jwt
from fastapi import HTTPException, Request

from elearning.config import settings
from elearning.utils.security import verify_token

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Sliding-window rate limiter kept in process memory

    Each window is (length in seconds, allowed requests). A client is the user
    id of a valid bearer token, otherwise its address; unverified tokens fall
    back to the address.
    """

    def __init__(self, requests_per_minute: int = 60, requests_per_hour: int = 1000):
        self.windows: Tuple[Tuple[int, int], ...] = (
            (60, requests_per_minute),
            (3600, requests_per_hour),
        )
        self.history: Dict[str, Deque[float]] = {}

    def _get_client_id(self, request: Request) -> str:
        authorization = request.headers.get("authorization")
        if authorization and authorization.startswith("Bearer "):
            try:
                user_id = verify_token(authorization[7:].strip()).get("id")
            except jwt.InvalidTokenError:
                user_id = None
            if user_id is not None:
                return f"user:{user_id}"

        return request.client.host if request.client else "unknown"

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop timestamps older than the longest window and forget idle clients"""
        cutoff = now - max(seconds for seconds, _ in self.windows)

        for client_id in list(self.history):
            timestamps = self.history[client_id]
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()
            if not timestamps:
                del self.history[client_id]

    async def check_rate_limit(self, request: Request) -> None:
        """
        Record the request or reject it

        Raises:
            HTTPException: 429 if any window is exhausted
        """
        client_id = self._get_client_id(request)
        now = time.time()
        self._cleanup_old_entries(now)
        timestamps = self.history.get(client_id, deque())

        for seconds, limit in self.windows:
            in_window = sum(1 for ts in timestamps if ts > now - seconds)
            if in_window >= limit:
                logger.warning(f"Rate limit exceeded ({seconds}s window): {client_id}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {limit} requests per {seconds} seconds",
                        "retry_after": seconds
                    }
                )

        timestamps.append(now)
        self.history[client_id] = timestamps


rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
