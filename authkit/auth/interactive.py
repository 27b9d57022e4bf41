"""Bridge between callback-style platform sign-in and ``async`` callers.

A host presents the platform's sign-in UI and reports the outcome through a
``CredentialContinuation``. The adapter awaits exactly one resolution: the
first writer wins and later completions are discarded.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class InteractiveFlowReason(str, Enum):
    """Outcome codes a platform sign-in sheet can report."""

    canceled = "canceled"
    failed = "failed"
    invalid_response = "invalid_response"
    not_handled = "not_handled"
    not_available = "not_available"
    unknown = "unknown"


class InteractiveFlowError(Exception):
    """Raised (or delivered) when an interactive flow does not yield a credential."""

    def __init__(self, reason: InteractiveFlowReason, message: str | None = None):
        self.reason = reason
        self.message = message or f"Interactive sign-in {reason.value}"
        super().__init__(self.message)


class InteractiveFlowTimeout(InteractiveFlowError):
    """Raised when nobody resolves the continuation in time."""

    def __init__(self, message: str = "Interactive sign-in timed out"):
        super().__init__(InteractiveFlowReason.failed, message)


@dataclass(frozen=True)
class AppleIDRequest:
    """One-shot request handed to the platform credential provider.

    ``hashed_nonce`` is the SHA-256 hex digest of the raw nonce; the raw
    value never leaves the adapter until it is sent to the identity backend.
    """

    hashed_nonce: str
    requested_scopes: tuple[str, ...] = ("full_name", "email")


@dataclass(frozen=True)
class AppleIDCredential:
    user: str
    identity_token: str | bytes | None
    email: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    authorization_code: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.given_name, self.family_name) if part)


class CredentialContinuation[T]:
    """Single-resolution future that may be completed from any thread."""

    def __init__(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._future: asyncio.Future[T] = self._loop.create_future()
        self._lock = threading.Lock()
        self._resolved = False

    @property
    def resolved(self) -> bool:
        with self._lock:
            return self._resolved

    def _claim(self) -> bool:
        with self._lock:
            if self._resolved:
                return False
            self._resolved = True
            return True

    def _call_in_loop(self, fn, *args) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            fn(*args)
        else:
            self._loop.call_soon_threadsafe(fn, *args)

    def _set_result(self, value: T) -> None:
        if not self._future.done():
            self._future.set_result(value)

    def _set_exception(self, error: BaseException) -> None:
        if not self._future.done():
            self._future.set_exception(error)

    def resume_returning(self, value: T) -> bool:
        """Complete with a credential. Returns False if already resolved."""
        if not self._claim():
            logger.debug("Discarding late interactive result")
            return False
        self._call_in_loop(self._set_result, value)
        return True

    def resume_throwing(self, error: BaseException) -> bool:
        """Complete with an error. Returns False if already resolved."""
        if not self._claim():
            logger.debug("Discarding late interactive error: %s", error)
            return False
        self._call_in_loop(self._set_exception, error)
        return True

    def cancel(self) -> None:
        """Abandon the wait; any later resolution is discarded."""
        if self._claim():
            self._call_in_loop(self._future.cancel)

    async def wait(self, timeout: float | None = None) -> T:
        """Await the single resolution.

        Raises:
            InteractiveFlowTimeout: when ``timeout`` elapses first
        """
        try:
            return await asyncio.wait_for(self._future, timeout)
        except TimeoutError as e:
            self._claim()
            raise InteractiveFlowTimeout() from e


class InteractiveCredentialProvider(Protocol):
    """Host-supplied platform sign-in (e.g. Sign in with Apple).

    ``perform_request`` presents the UI and must eventually resolve the
    continuation with an ``AppleIDCredential`` or an ``InteractiveFlowError``.
    """

    def is_available(self) -> bool: ...

    def perform_request(
        self,
        request: AppleIDRequest,
        continuation: CredentialContinuation[AppleIDCredential],
    ) -> None: ...

    def cancel_request(self) -> None: ...
