"""
Error taxonomy for the channel synchronization layer.

Every vendor-call failure is raised as one of these and propagates unchanged
to the route handler, which maps it to an HTTP status (see routes/_errors.py).
"""

from __future__ import annotations

from typing import Any


class ChannelSyncError(Exception):
    """Base class for all errors raised by channel_sync."""


class AuthError(ChannelSyncError):
    """Credentials are present but invalid, or a token refresh failed."""


class RemoteApiError(ChannelSyncError):
    """
    A vendor answered with a non-2xx HTTP status.

    The status and raw body are kept so the caller can show the vendor's own
    diagnostics (Channex in particular returns detailed validation errors).
    """

    def __init__(self, status: int, body: Any, message: str | None = None):
        self.status = status
        self.body = body
        super().__init__(message or f"Remote API error {status}: {body}")


class ProtocolError(ChannelSyncError):
    """HTTP 2xx, but the payload reports `success: false` or has an unexpected shape."""

    def __init__(self, message: str, body: Any = None):
        self.body = body
        super().__init__(message)


class CommandRejected(ProtocolError):
    """No candidate lock command was accepted by the device."""


class NotConnected(ChannelSyncError):
    """The operation needs a platform connection that does not exist for this scope."""


class NotConfigured(NotConnected):
    """A credential row exists (or not) but lacks the fields the platform requires."""


class NotFound(ChannelSyncError):
    """A local record (unit, lock, property) does not exist or is not the caller's."""


class InvalidRequest(ChannelSyncError):
    """The request is well-formed but the local data cannot satisfy it."""


class NoMatch(ChannelSyncError):
    """
    No local unit matched a remote device.

    This is a skip signal: the reconciler logs it and moves on, it never
    escapes to callers.
    """

    def __init__(self, device_id: str, device_name: str):
        self.device_id = device_id
        self.device_name = device_name
        super().__init__(f"No unit matches device {device_name!r} ({device_id})")
