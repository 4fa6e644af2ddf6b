"""Retry logic wrapper with exponential backoff."""

import time
from functools import wraps
from typing import Any, Callable, Tuple, Type, TypeVar, cast

from stockdash.core.logger import logger

F = TypeVar('F', bound=Callable[..., Any])


def with_retries(
    max_retries: int = 3,
    initial_delay: float = 2,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[F], F]:
    """
    A decorator that retries a function upon failure using exponential backoff.

    Args:
        max_retries (int): Maximum number of retry attempts.
        initial_delay (float): Initial delay in seconds before the first retry.
                               Subsequent delays double with each attempt.
        retry_on (tuple): Exception types that trigger a retry; anything else propagates at once.
        sleep (Callable): Sleep function, replaceable in tests.

    Returns:
        Callable: The decorated function.
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    if attempt >= max_retries:
                        logger.error(f"'{func.__name__}' failed after {max_retries} retries: {e}")
                        raise
                    attempt += 1
                    logger.warning(
                        f"'{func.__name__}' failed (attempt {attempt}/{max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    sleep(delay)
                    delay *= 2
        return cast(F, wrapper)
    return decorator
