"""Exceptions raised by the rqm components."""
from __future__ import annotations


class RqmError(Exception):
    """Base class for fatal errors reported by the CLI."""


class IdExhaustedError(RqmError):
    """The identifier generator could not find an unused identifier."""


class RegistryMissingError(RqmError):
    """The registry file does not exist yet."""


class RegistryFormatError(RqmError):
    """The registry file exists but cannot be parsed."""


class ConfigError(RqmError):
    """The configuration file cannot be parsed."""
