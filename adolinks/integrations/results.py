"""Tagged outcome types for Azure DevOps operations.

Expected failure paths (remote 4xx/5xx, transport errors, payloads that
cannot be interpreted) are returned as values rather than raised:

    result = await client.get_work_item(project_urls, 42)
    if isinstance(result, Failure):
        logger.warning("Lookup failed: %s", result.error_string)
    else:
        detail = result.value

``Result[T]`` is ``Success[T] | Failure``. The link mapper may also return
``Disabled`` so the host can tell "intentionally skipped" from "errored".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successful outcome carrying a value."""

    value: T

    succeeded: ClassVar[bool] = True


@dataclass(frozen=True)
class Failure:
    """A failed outcome carrying one or more human-readable messages.

    Messages are suitable for direct display: they never contain stack
    traces or credentials.
    """

    errors: tuple[str, ...]

    succeeded: ClassVar[bool] = False

    @classmethod
    def of(cls, *messages: str) -> Failure:
        """Create a Failure from one or more messages."""
        return cls(errors=tuple(messages))

    @property
    def error_string(self) -> str:
        """All messages joined into a single display string."""
        return "\n".join(self.errors)


@dataclass(frozen=True)
class Disabled:
    """The extension is disabled in configuration, so nothing was attempted."""

    succeeded: ClassVar[bool] = True


Result = Union[Success[T], Failure]
MapResult = Union[Success[T], Failure, Disabled]


__all__ = [
    "Success",
    "Failure",
    "Disabled",
    "Result",
    "MapResult",
]
