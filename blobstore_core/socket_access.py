"""Scoped socket privileges for object-store calls.

A host may run this library under a restrictive sandbox (``socket_sandbox``)
in which outbound socket operations are refused. Every network call made by
the store runs inside ``privileged()``, which lifts that restriction for the
current context only and restores the previous state on every exit path.

The sandbox is enforced with a process-wide audit hook (PEP 578). Audit hooks
cannot be removed, so the hook is installed once and stays a no-op for any
context that has not entered ``socket_sandbox()``. Both flags live in context
variables, so they follow the current thread or asyncio task.

The hook raises ``SocketAccessDeniedError`` (a ``PermissionError``) at the
socket call. HTTP libraries treat that as a failed connection: through a boto3
client the caller sees ``botocore.exceptions.EndpointConnectionError``, raised
after botocore's own connection retries, with the ``SocketAccessDeniedError``
further down its ``__cause__``/``__context__`` chain.
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, TypeVar

from blobstore_core.errors import SocketAccessDeniedError

T = TypeVar("T")

GUARDED_AUDIT_EVENTS = frozenset(
    {"socket.connect", "socket.getaddrinfo", "socket.sendto", "socket.sendmsg"}
)

_socket_allowed: ContextVar[bool] = ContextVar("blobstore_socket_allowed", default=False)
_sandboxed: ContextVar[bool] = ContextVar("blobstore_sandboxed", default=False)

_hook_lock = threading.Lock()
_hook_installed = False


def _audit_hook(event: str, args: tuple[Any, ...]) -> None:
    if event not in GUARDED_AUDIT_EVENTS:
        return
    if _sandboxed.get() and not _socket_allowed.get():
        raise SocketAccessDeniedError(f"{event} is not permitted outside a privileged scope")


def install_socket_guard() -> None:
    """Install the sandbox audit hook once per process."""

    global _hook_installed
    with _hook_lock:
        if _hook_installed:
            return
        sys.addaudithook(_audit_hook)
        _hook_installed = True


def is_socket_access_allowed() -> bool:
    return _socket_allowed.get() or not _sandboxed.get()


@contextmanager
def socket_sandbox() -> Iterator[None]:
    """Refuse outbound socket operations in this context unless privileged."""

    install_socket_guard()
    token = _sandboxed.set(True)
    try:
        yield
    finally:
        _sandboxed.reset(token)


@contextmanager
def privileged() -> Iterator[None]:
    """Allow outbound socket operations for the duration of the block."""

    token = _socket_allowed.set(True)
    try:
        yield
    finally:
        _socket_allowed.reset(token)


def do_privileged(operation: Callable[[], T]) -> T:
    """Run ``operation`` with socket access allowed and return its result.

    Exceptions raised by ``operation`` propagate unchanged.
    """

    with privileged():
        return operation()


def do_privileged_void(operation: Callable[[], object]) -> None:
    with privileged():
        operation()
