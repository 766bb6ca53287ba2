"""Metrics hook protocol and no-op default implementation.

The :class:`~tiptapify.engine.NoteConverter` facade reports how often each
conversion runs, how long it takes and how many anomalies it produced.  By
default a :class:`NoopMetricsHook` discards everything; hosts may pass any
object satisfying :class:`MetricsHook` via ``TiptapifyConfig.metrics``.

Emitted metric names:

* ``tiptapify.conversions_total``          -- counter, tag ``direction``
* ``tiptapify.conversion_warnings_total``  -- counter, tag ``direction``
* ``tiptapify.conversion_duration_ms``     -- timing, tag ``direction``
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy."""

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Metrics backend that silently discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
