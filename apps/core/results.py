"""
Result type returned by the public service operations.

Service internals raise CommerceException subclasses; the
``service_operation`` decorator turns them into ``Err`` values so callers
(API views, scripts, tests) branch on ``result.ok`` instead of catching.
"""
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Generic, Optional, TypeVar

from django.db import DatabaseError

from .exceptions import CommerceException, InternalException

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value (Ok) or a CommerceException (Err)."""
    value: Optional[T] = None
    error: Optional[CommerceException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def unwrap(self) -> T:
        """Return the value or re-raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value


def Ok(value: Any = None) -> Result:
    return Result(value=value)


def Err(error: CommerceException) -> Result:
    return Result(error=error)


def service_operation(name: str) -> Callable:
    """
    Wrap a service function so it always returns a Result.

    Business errors pass through as Err. Database errors and anything
    unexpected are logged with their traceback and surface as a generic
    InternalException, so no storage-layer text reaches the caller.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Result:
            try:
                return Ok(func(*args, **kwargs))
            except CommerceException as e:
                logger.info(f"[{name}] rejected: {e.kind} - {e.message}")
                return Err(e)
            except DatabaseError as e:
                logger.exception(f"[{name}] database error: {e}")
                return Err(InternalException())
            except Exception as e:
                logger.exception(f"[{name}] unexpected error: {e}")
                return Err(InternalException())
        return wrapper
    return decorator
