"""Error taxonomy for the generator.

Every fatal condition maps to one exception class, and every class carries
the process exit status the CLI reports for it.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for all fatal generator errors."""

    exit_code = 1


class ConfigError(GeneratorError):
    exit_code = 2


class DiscoveryRequestError(GeneratorError):
    """The discovery (profile root) request failed."""

    exit_code = 3


class DiscoveryFormatError(GeneratorError):
    """The discovery response has no link collection."""

    exit_code = 4


class AuthenticationError(GeneratorError):
    exit_code = 5


class DescriptionError(GeneratorError):
    """Schema or profile of a single resource could not be collected."""

    exit_code = 6


class ResolutionError(GeneratorError):
    """A relationship entry could not be resolved against generated types."""

    exit_code = 7


class EmissionError(GeneratorError):
    exit_code = 8


class CompileError(GeneratorError):
    exit_code = 9
