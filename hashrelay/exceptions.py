"""
Exception hierarchy for hashrelay.

All errors raised by the library derive from HashRelayError. Report failures
carry the process exit code the command line front end terminates with.
"""


class HashRelayError(Exception):
    """Base class for all hashrelay errors."""


class ConfigurationError(HashRelayError):
    """Raised when run settings are invalid (e.g. a worker count below 1)."""


class InputError(HashRelayError):
    """Raised when the input file cannot be read or is malformed."""


class ActorError(HashRelayError):
    """Raised when the actor pipeline is used outside its lifecycle."""


class ReportError(HashRelayError):
    """
    Fatal failure while emitting the report.

    Attributes:
        exit_code: Process exit status for this failure
    """

    exit_code = 1

    @classmethod
    def from_exit_code(cls, exit_code: int, message: str) -> "ReportError":
        """Rebuild the matching report error from its exit code."""
        for error_cls in (SinkOpenError, SinkWriteError):
            if error_cls.exit_code == exit_code:
                return error_cls(message)
        return cls(message)


class SinkOpenError(ReportError):
    """The report sink could not be opened."""

    exit_code = 1


class SinkWriteError(ReportError):
    """Writing to the report sink failed part way through."""

    exit_code = 2


class ProtocolViolation(HashRelayError):
    """
    A message arrived in an actor state where it is not valid.

    Actors catch this, log it and ignore the message.
    """
