from __future__ import annotations


class L10nError(Exception):
    """Base class for recoverable errors raised by a single user action."""


class UnreadableDocumentError(L10nError):
    """Raised when a selected file cannot be parsed as a spreadsheet."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Cannot read '{name}' as a spreadsheet: {reason}")
        self.name = name
        self.reason = reason


class ProtectedKeyError(L10nError):
    """Raised when removing a key that is essential under the active configuration."""

    def __init__(self, key: str) -> None:
        super().__init__(f'"{key}" is a core key and cannot be removed.')
        self.key = key


class DuplicateKeyError(L10nError):
    """A key name is already registered. KeyRegistry.add treats this as a no-op."""


class EmptyInputError(L10nError):
    """Raised when exporting with no loaded languages."""
