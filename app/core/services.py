"""
Base service layer patterns for business logic encapsulation.

Services encapsulate business logic separate from views and models.
Views and consumers handle transport concerns, models handle data,
services handle logic.

Error Handling:
    - Expected failures (bad input, missing permission) raise the matching
      core.exceptions class; transports map them to responses.
    - Datastore failures are logged and re-raised as PersistenceError by
      BaseService.atomic().

Usage:
    from core.services import BaseService

    class MessageService(BaseService):
        @classmethod
        def send(cls, sender, recipient, content):
            if not content.strip():
                raise ValidationError("Message content cannot be empty")

            with cls.atomic("storing message"):
                message = Message.objects.create(...)

            cls.get_logger().debug(f"Stored message {message.id}")
            return message

Related:
    - core.exceptions: Exception taxonomy
    - core.exception_handlers: HTTP mapping
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import DatabaseError, transaction

from core.exceptions import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management with failure translation

    Design Notes:
        - Use @classmethod (no instance state)
        - Services should be stateless
        - Raise core.exceptions for expected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs (e.g. "messaging.services.MessageService").
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls, context: str = "") -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this block are committed together
        or rolled back together. A DatabaseError escaping the block is
        logged with traceback and re-raised as PersistenceError.

        Args:
            context: Short description of the operation, used in logs

        Example:
            with cls.atomic("sending message"):
                message = Message.objects.create(...)
                conversation.save(update_fields=["last_message_at"])
        """
        try:
            with transaction.atomic():
                yield
        except DatabaseError as exc:
            message = f"Database failure while {context}" if context else "Database failure"
            cls.get_logger().error(f"{message}: {exc}", exc_info=True)
            raise PersistenceError(
                "The datastore is unavailable. Please try again.",
                details={"operation": context} if context else None,
            ) from exc
