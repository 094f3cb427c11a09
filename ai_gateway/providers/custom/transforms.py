"""Request and response transform strategies for custom endpoints."""

from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class Transform(Protocol):
    """Rewrites a JSON payload. Must return the payload to use."""

    def apply(self, payload: Any) -> Any:
        ...


class FunctionTransform:
    """Adapts a plain callable to the ``Transform`` protocol."""

    def __init__(self, func: Callable[[Any], Any]):
        self.func = func

    def apply(self, payload: Any) -> Any:
        return self.func(payload)

    def __repr__(self) -> str:
        return f"FunctionTransform({getattr(self.func, '__name__', self.func)!r})"


def as_transform(value: Any) -> Optional[Transform]:
    """Return ``value`` as a ``Transform``, wrapping plain callables."""
    if value is None or isinstance(value, Transform):
        return value
    if callable(value):
        return FunctionTransform(value)
    raise TypeError(f"Transform must be callable or define apply(), got {type(value).__name__}")
