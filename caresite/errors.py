from __future__ import annotations


class SiteError(Exception):
    """Base class for errors handled at the request boundary."""


class ValidationError(SiteError):
    """A required field is missing or blank (400)."""


class StorageError(SiteError):
    """A flat file could not be read or written (500)."""


class MailError(SiteError):
    """The outbound mail channel refused or failed a send (500)."""
