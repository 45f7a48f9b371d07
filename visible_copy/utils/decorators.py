import logging
from functools import wraps
from typing import Callable, Optional, TypeVar

from selenium.common.exceptions import WebDriverException

logger = logging.getLogger(__name__)


T = TypeVar('T')

def error_handler(func: Callable[..., T]) -> Callable[..., Optional[T]]:
    """
    Turn a failed browser call into a logged None.

    Only WebDriver failures are absorbed, for calls whose failure must not
    end a picker session (refreshing the mirrored UI); any other exception
    is a bug and propagates.
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> Optional[T]:
        try:
            return func(*args, **kwargs)
        except WebDriverException as e:
            reason = (e.msg or type(e).__name__).splitlines()[0]
            logger.error(f"{func.__qualname__} failed in page: {reason}")
            return None
    return wrapper
