"""
Learner identity for the module engine.

The engine never reads a global session. Callers resolve the current user
once through a SessionProvider and pass the resulting LearnerContext in
explicitly.

A provider that hangs or fails is treated as "nobody is signed in".
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from enum import Enum
from typing import Mapping, Optional, Protocol

from pydantic import BaseModel

from .config import AUTH_TIMEOUT_SECONDS


logger = logging.getLogger(__name__)


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class LearnerContext(BaseModel):
    user_id: str
    name: Optional[str] = None
    role: Role = Role.STUDENT

    @property
    def display_name(self) -> str:
        return self.name or self.user_id


class SessionProvider(Protocol):
    def get_current_user(self) -> Optional[LearnerContext]:
        ...


class EnvironmentSessionProvider:
    """
    Provider for single-learner local use.

    Reads VARK_LEARNER_ID, VARK_LEARNER_NAME and VARK_LEARNER_ROLE.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        self.env = os.environ if env is None else env

    def get_current_user(self) -> Optional[LearnerContext]:
        user_id = self.env.get("VARK_LEARNER_ID")
        if not user_id:
            return None
        return LearnerContext(
            user_id=user_id,
            name=self.env.get("VARK_LEARNER_NAME"),
            role=self.env.get("VARK_LEARNER_ROLE", Role.STUDENT.value),
        )


def resolve_learner(
    provider: SessionProvider,
    timeout: float = AUTH_TIMEOUT_SECONDS,
) -> Optional[LearnerContext]:
    """
    Ask the provider for the current user, giving up after `timeout` seconds.

    Returns:
        The signed-in learner, or None when there is no session, the
        provider timed out, or the provider failed
    """
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(provider.get_current_user)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout:
        logger.warning(f"Session lookup timed out after {timeout}s; continuing signed out")
        return None
    except Exception as e:
        # Includes a malformed identity (e.g. unknown role) from the provider
        logger.warning(f"Session lookup failed: {e}; continuing signed out")
        return None
    finally:
        # Don't block on a hung provider
        executor.shutdown(wait=False)
