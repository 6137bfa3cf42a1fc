# auto_invoice/errors.py
from __future__ import annotations

from typing import List, Optional


class AutoInvoiceError(Exception):
    """Base class for errors raised by the invoice run."""


class ConfigurationError(AutoInvoiceError):
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Configuration validation failed:\n" + "\n".join(self.errors))


class CounterStoreError(AutoInvoiceError):
    """The invoice counter could not be read or persisted."""


class ConcurrentRunError(CounterStoreError):
    """Another run changed the counter between our read and our write."""

    def __init__(self, expected: Optional[str], found: Optional[str]):
        self.expected = expected
        self.found = found
        super().__init__(
            f"Invoice counter changed during reservation (expected {expected!r}, "
            f"found {found!r}); another run is probably active"
        )


class CounterLockedError(ConcurrentRunError):
    """The counter lock file is held by another run, or left over from a killed one."""

    def __init__(self, lock_path: str):
        self.lock_path = lock_path
        self.expected = None
        self.found = None
        CounterStoreError.__init__(
            self,
            f"Invoice counter is locked by {lock_path}; another run is active, "
            "or remove the file if no run is in progress",
        )


class MailerConfigurationError(AutoInvoiceError):
    """Settings required to talk to the email provider are missing."""
