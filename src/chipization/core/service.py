"""Shared plumbing for the core services.

Every mutating core operation reads current state, validates it and writes
inside one repository transaction. ``transaction()`` commits on success and
rolls back on any exception; ``reject()`` logs the refusal and builds the
error to raise.
"""

from contextlib import asynccontextmanager
from typing import Optional, Type

from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger
from .clock import Clock, system_clock
from .errors import ChipizationError


class CoreService:
    """Base class for services operating on a repository container."""

    def __init__(self, repos: RepositoryContainer, clock: Optional[Clock] = None):
        self.repos = repos
        self.clock = clock or system_clock
        self.logger = get_logger(type(self).__module__)

    @asynccontextmanager
    async def transaction(self):
        try:
            yield
            await self.repos.commit()
        except Exception:
            await self.repos.rollback()
            raise

    def reject(
        self,
        error_cls: Type[ChipizationError],
        operation: str,
        message: str,
        **context,
    ) -> ChipizationError:
        details = ", ".join(f"{k}={v}" for k, v in context.items())
        self.logger.warning(f"{operation} rejected: {message} ({details})")
        return error_cls(message, context=context)
