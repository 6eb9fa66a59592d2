import asyncio
import functools
from typing import Callable, Dict, Optional, Type, TypeVar
from loguru import logger
from ..exceptions import ShotScriptException

T = TypeVar('T')


def _wrap(func: Callable[..., T], on_error: Callable[[Exception], Optional[Exception]]) -> Callable[..., T]:
    """
    Wrap sync or async ``func`` so every exception goes through ``on_error``.
    A returned exception is raised from the original; None re-raises it as is.
    """
    if asyncio.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                replacement = on_error(e)
                if replacement is not None:
                    raise replacement from e
                raise
        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            replacement = on_error(e)
            if replacement is not None:
                raise replacement from e
            raise
    return sync_wrapper


def log_exceptions(
    log_level: str = "ERROR",
    include_traceback: bool = True,
    custom_message: Optional[str] = None
):
    """
    Decorator to log exceptions before re-raising them unchanged.

    Args:
        log_level: Log level for exception logging
        include_traceback: Whether to include traceback in log
        custom_message: Prefix for the log line; defaults to the function name
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        message = custom_message or f"Exception in {func.__name__}"

        def on_error(e: Exception) -> None:
            logger.opt(exception=include_traceback).log(log_level, f"{message}: {e}")
            return None

        return _wrap(func, on_error)

    return decorator


def convert_exceptions(exception_map: Dict[Type[Exception], Type[ShotScriptException]]):
    """
    Decorator to translate third-party exceptions into shotscript exceptions.

    ShotScriptException instances pass through untouched, so a provider can
    raise its own tagged error inside a converted method. The source type and
    any ``status_code`` attribute land in the new exception's ``details``.
    """
    def on_error(e: Exception) -> Optional[ShotScriptException]:
        if isinstance(e, ShotScriptException):
            return None
        target = next((t for source, t in exception_map.items() if isinstance(e, source)), None)
        if target is None:
            return None
        details = {"original_exception": type(e).__name__}
        if getattr(e, "status_code", None) is not None:
            details["status_code"] = e.status_code
        return target(str(e), details=details)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        return _wrap(func, on_error)

    return decorator
