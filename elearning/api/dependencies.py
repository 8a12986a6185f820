"""
Shared FastAPI dependencies
"""
import logging

import jwt
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from typing import Optional

from elearning.database import get_db
from elearning.exceptions import UnauthorizedError
from elearning.models import User
from elearning.utils.quiz_store import QuizSessionStore
from elearning.utils.security import verify_token

logger = logging.getLogger(__name__)


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> User:
    """
    Bearer-token gate

    Raises:
        UnauthorizedError: header missing, wrong scheme, bad token or unknown user
    """
    if not authorization:
        raise UnauthorizedError("Invalid Token")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise UnauthorizedError("Unauthorized Error")

    try:
        payload = verify_token(token)
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {str(e)}")
        raise UnauthorizedError("Invalid Token")

    user_id = payload.get("id")
    user = db.get(User, user_id) if user_id is not None else None
    if not user:
        raise UnauthorizedError("Unauthorized Error")

    return user


def get_quiz_store(request: Request) -> QuizSessionStore:
    """Quiz store owned by the running application"""
    return request.app.state.quiz_store
