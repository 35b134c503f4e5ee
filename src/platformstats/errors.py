"""Exception hierarchy for platformstats."""

from __future__ import annotations

import errno as _errno


class PlatformStatsError(Exception):
    """Base exception for the platformstats package."""


class IOUnavailable(PlatformStatsError, OSError):
    """A required pseudo-file could not be opened or listed.

    Carries the ``errno`` of the underlying failure so the CLI can use it as
    the process exit status.
    """

    def __init__(
        self, message: str, errno: int | None = None, filename: str = ""
    ) -> None:
        super().__init__(errno if errno is not None else _errno.EIO, message, filename)

    def __str__(self) -> str:
        return self.strerror or super().__str__()

    @classmethod
    def from_oserror(cls, exc: OSError, path: object) -> IOUnavailable:
        """Wrap an ``OSError`` raised while touching *path*."""
        reason = exc.strerror or type(exc).__name__
        return cls(f"unable to open {path}: {reason}", exc.errno, str(path))


class EnumerationError(IOUnavailable):
    """The hwmon class directory itself could not be listed."""


class MalformedData(PlatformStatsError, ValueError):
    """A pseudo-file was read but its content did not parse."""


class DivisionUndefined(PlatformStatsError, ZeroDivisionError):
    """CPU load requested over a zero-width sampling window."""
