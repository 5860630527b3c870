"""HTTP transport backed by :mod:`httpx`."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import httpx

from ..protocol.message import Request, Response
from .base import Transport, TransportConnectionError, TransportError, TransportTimeout


logger = logging.getLogger(__name__)


class HttpTransport(Transport):
    """POST requests with a shared :class:`httpx.Client`.

    The client is created lazily on the first :meth:`send` if :meth:`open`
    was not called explicitly. Timeouts are per request.
    """

    def __init__(self, client: Optional[httpx.Client] = None):
        self._client = client
        self._owned = client is None
        self._lock = threading.Lock()

    def open(self) -> None:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client()
                self._owned = True

    def close(self) -> None:
        with self._lock:
            client = self._client
            self._client = None

        if client is not None and self._owned:
            client.close()

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def send(self, request: Request) -> Response:

        if self._client is None:
            self.open()

        client = self._client
        if client is None:
            raise TransportConnectionError("transport is closed")

        logger.debug("POST %s (request %d)", request.url, request.id)

        try:
            reply = client.post(
                request.url,
                content=request.encode(),
                headers=request.headers,
                timeout=request.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportTimeout(str(e)) from e
        except httpx.TransportError as e:
            raise TransportConnectionError(str(e)) from e
        except httpx.HTTPError as e:
            raise TransportError(str(e)) from e

        return Response(reply.status_code, reply.content)
