"""DEBUG call tracing for the proof engine modules.

A module opts in with ``apply_debug_logging(globals(), logger=logger)`` as
its last statement.  Every plain function defined in that module is then
replaced by a wrapper that, only while DEBUG is enabled for the logger,
records the call with its arguments and the returned value.
"""

from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, Iterator, Mapping, MutableMapping, Optional, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_MAX_ITEMS = 6
_MAX_TEXT = 300
_WRAPPED_FLAG = "_geoproof_traced"

_short = reprlib.Repr()
_short.maxstring = 120
_short.maxother = 120


def _describe_domain(value: Any) -> Optional[str]:
    # Imported lazily: these modules call apply_debug_logging at import time.
    from .context import ResolvedContext
    from .statements import Statement

    if isinstance(value, Statement):
        return f"<{value.kind}: {value}>"
    if isinstance(value, ResolvedContext):
        return f"ResolvedContext({len(value.points)} points)"
    if hasattr(value, "ok") and hasattr(value, "message"):
        return "ok" if value.ok else f"rejected({value.message!r})"
    outcome = getattr(value, "outcome", None)
    if isinstance(outcome, Statement) and hasattr(value, "reason_id"):
        refs = ", ".join(str(ref) for ref in value.prerequisite_refs)
        return f"step[{value.reason_id}: {outcome} <- {refs or '-'}]"
    return None


def _clip(parts: Iterator[str], total: int) -> str:
    shown = list(parts)
    if total > _MAX_ITEMS:
        shown.append(f"... +{total - _MAX_ITEMS}")
    return ", ".join(shown)


def describe(value: Any) -> str:
    """Short, bounded rendering of ``value`` for trace lines."""

    text = _describe_domain(value)
    if text is not None:
        return text
    if isinstance(value, np.ndarray):
        return f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"
    if isinstance(value, Mapping):
        pairs = (f"{describe(k)}: {describe(v)}" for k, v in list(value.items())[:_MAX_ITEMS])
        return "{" + _clip(pairs, len(value)) + "}"
    if isinstance(value, (list, tuple)):
        items = (describe(item) for item in value[:_MAX_ITEMS])
        body = _clip(items, len(value))
        return f"({body})" if isinstance(value, tuple) else f"[{body}]"
    text = _short.repr(value)
    return text if len(text) <= _MAX_TEXT else text[:_MAX_TEXT] + "..."


def _call_signature(args: Iterable[Any], kwargs: Mapping[str, Any]) -> str:
    rendered = [describe(arg) for arg in args]
    rendered.extend(f"{key}={describe(val)}" for key, val in kwargs.items())
    return ", ".join(rendered)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Decorator tracing calls of the wrapped function at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, _WRAPPED_FLAG, False):
            return func
        label = name or func.__qualname__

        @wraps(func)
        def traced(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("call %s(%s)", label, _call_signature(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("%s raised", label)
                raise
            if log_result:
                logger.debug("%s returned %s", label, describe(result))
            return result

        setattr(traced, _WRAPPED_FLAG, True)
        return cast(F, traced)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Iterable[str] = (),
) -> None:
    """Trace every function defined in the module owning ``namespace``."""

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(str(module_name))
    excluded = set(skip)
    for attr, value in list(namespace.items()):
        if attr in excluded or not inspect.isfunction(value):
            continue
        if value.__module__ == module_name:
            namespace[attr] = debug_log_call(logger, name=attr)(value)
