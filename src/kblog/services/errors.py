"""Exception taxonomy for the service layer.

These never reach callers of a service: the envelope boundary in
:class:`~kblog.services.base.Service` turns them into Error envelopes.
Store failures use :class:`~kblog.infrastructure.store.StoreError`.
"""

from __future__ import annotations


class KblogError(Exception):
    """Base class for kblog service errors."""


class ValidationError(KblogError):
    """A hook, validator, or guard rejected the request data."""


class NotAuthorizedError(KblogError):
    """The caller lacks the role required for the operation."""


class AllocationError(KblogError):
    """The sequential id counter could not be read or written."""


class ServiceNotFoundError(KblogError):
    """No service is mounted at the requested path."""
