"""Exceptions raised by the generator and the version engine.

Every error carries an optional remediation ``hint`` that the CLI prints
below the message. Core code only raises; turning an error into exit
status ``1`` is the job of the ``main()`` functions in ``shikomi.cli``.
"""


class ShikomiError(Exception):
    """Base class for all precondition, validation and parse failures."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class PreconditionError(ShikomiError):
    """Target exists, file is missing, or nothing to operate on."""


class ParameterValidationError(ShikomiError, ValueError):
    """A label or variable name cannot become a usable identifier."""


class NotVersionedError(ShikomiError):
    """Artifact carries no ``readonly SCRIPT_VERSION=`` declaration."""


class AlreadyVersionedError(ShikomiError):
    """``init`` was requested on an artifact that is already versioned."""


class VersionFormatError(ShikomiError, ValueError):
    """Version string or version declaration has an unrecognized shape."""


class InvalidBumpKindError(ShikomiError, ValueError):
    """Bump kind is not one of major, minor, patch."""
