"""
Service layer foundation.

BaseService gives every affiliate service its session and a logger bound
to the service name. The decorators below own the transaction boundary of
public service operations.
"""

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.utils.exceptions import AffiliateError


T = TypeVar("T")


@dataclass
class ServiceResult:
    """Outcome of a request-boundary call: data on success, error otherwise."""
    success: bool
    data: Any = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def from_error(cls, error: AffiliateError) -> "ServiceResult":
        """Failed result carrying the error's code and message."""
        return cls(success=False, error=error.message, error_code=error.code)


class BaseService:
    """Holds the session shared by a service and its repositories."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Run a service method as one unit of work.

    The session is committed when the method returns and rolled back when
    it raises. AffiliateError is a rejected request and logs a warning;
    any other exception logs an error with traceback. The exception is
    always re-raised.
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
            await self.session.commit()
        except AffiliateError as e:
            await self.session.rollback()
            self.logger.warning(
                f"{func.__name__} rejected: {e.code}",
                extra={"function": func.__name__, "error": e.message},
            )
            raise
        except Exception as e:
            await self.session.rollback()
            self.logger.error(
                f"{func.__name__} failed, transaction rolled back",
                extra={"function": func.__name__, "error": str(e)},
                exc_info=True,
            )
            raise
        return result

    return wrapper


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """Log how long a read-only service method took and whether it failed."""
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        started = time.perf_counter()
        try:
            return await func(self, *args, **kwargs)
        except Exception as e:
            self.logger.info(
                f"{func.__name__} raised {type(e).__name__}",
                extra={"function": func.__name__, "error": str(e)},
            )
            raise
        finally:
            self.logger.debug(
                f"{func.__name__} finished",
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(time.perf_counter() - started, 3),
                },
            )

    return wrapper
