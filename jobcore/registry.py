"""
Handler registry: maps job type tags to the functions that execute them.

Each collaborator registers its handler once at startup (the email module
for EMAIL, the image module for IMAGE_RESIZE and so on). The dispatcher
looks the handler up by the job type of every claimed job.
"""

import enum
import logging
from typing import Any, Callable, Iterable, TypeVar

from jobcore.errors import ConfigurationError


logger = logging.getLogger(__name__)


Handler = Callable[[Any], Any]
DecoratedHandler = TypeVar("DecoratedHandler", bound=Handler)


def job_type_tag(job_type: str | enum.Enum) -> str:
    if isinstance(job_type, enum.Enum):
        return str(job_type.value)
    return job_type


class HandlerRegistry:
    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, job_type: str | enum.Enum, fn: Handler) -> None:
        """Register ``fn`` as the handler of ``job_type``.

        Raises:
            ConfigurationError: If the job type already has a handler or
                ``fn`` is not callable.
        """
        tag = job_type_tag(job_type)
        if not tag or not isinstance(tag, str):
            raise ConfigurationError("Job type must be a non-empty string")
        if not callable(fn):
            raise ConfigurationError(f"Handler for {tag} is not callable")
        if tag in self._handlers:
            raise ConfigurationError(f"Job type {tag} already has a handler")

        self._handlers[tag] = fn
        logger.debug(
            f"Registered {getattr(fn, '__qualname__', fn)} for job type {tag}"
        )

    def handler(
        self, job_type: str | enum.Enum
    ) -> Callable[[DecoratedHandler], DecoratedHandler]:
        """Decorate a function to register it as a handler.

        Examples:

            >>> @registry.handler(JobType.EMAIL)
            ... def send_email(payload) -> None:
            ...     mailer.send(payload["to"], payload["subject"])
        """

        def decorator(fn: DecoratedHandler) -> DecoratedHandler:
            self.register(job_type, fn)
            return fn

        return decorator

    def get(self, job_type: str | enum.Enum) -> Handler:
        tag = job_type_tag(job_type)
        handler = self._handlers.get(tag)
        if handler is None:
            raise ConfigurationError(
                f"No handler registered for job type {tag!r}. "
                f"Available: {self.job_types()}"
            )
        return handler

    def validate(self, job_types: Iterable[str | enum.Enum]) -> None:
        """Make sure every job type in ``job_types`` has a handler.

        Raises:
            ConfigurationError: Lists all job types without a handler.
        """
        missing = sorted(
            {job_type_tag(t) for t in job_types} - set(self._handlers)
        )
        if missing:
            raise ConfigurationError(
                f"No handler registered for job types: {', '.join(missing)}"
            )

    def job_types(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, job_type: object) -> bool:
        if not isinstance(job_type, (str, enum.Enum)):
            return False
        return job_type_tag(job_type) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
