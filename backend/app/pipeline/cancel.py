"""
PDFMaster — Cooperative cancellation for worker-thread pipelines.

The request task cancels the token when it is itself cancelled; the worker
thread checks it before allocating each page or image.
"""

from __future__ import annotations

import threading

from app.errors import RequestCancelledError


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError()


def checkpoint(token: CancellationToken | None) -> None:
    """Raise RequestCancelledError if ``token`` has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()
