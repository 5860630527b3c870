"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`mtarget.protocol` so the protocol remains
transport-agnostic; the engine only ever talks to a :class:`Transport`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..protocol.message import Request, Response


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """A request did not receive a timely response."""


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


class Transport(ABC):
    """Minimal contract for a wire-level transport.

    :meth:`send` is called from a worker thread and may block for up to the
    request timeout; implementations must be safe to call from several
    threads at once.
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire any underlying resources (connection pools, sessions)."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resources."""

    @abstractmethod
    def send(self, request: Request) -> Response:
        """POST the request and return the raw response.

        Any HTTP status is a valid :class:`Response`; only a failure to get a
        response at all raises :class:`TransportError`.
        """

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently usable."""
        return False
