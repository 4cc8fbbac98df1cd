"""Errors raised while turning sessions into update records."""

from __future__ import annotations


class TrackingError(RuntimeError):
    """Base class for pipeline-internal failures."""


class UpdateConstructionError(TrackingError):
    """Raised when an update cannot be built from a session.

    The pipeline logs the failure, drops that session and carries on.
    """

    @classmethod
    def empty_session(cls, key: str) -> UpdateConstructionError:
        """Return an error for a session without events."""
        return cls(f"session {key!r} has no events")

    @classmethod
    def missing_summary(cls, key: str) -> UpdateConstructionError:
        """Return an error for a verdict with a blank summary."""
        return cls(f"session {key!r} has no summary text")

    @classmethod
    def missing_url(cls, key: str) -> UpdateConstructionError:
        """Return an error for a session whose document URL is blank."""
        return cls(f"session {key!r} has no document URL")


class TrackerConfigError(ValueError):
    """Raised when tracker environment configuration is invalid."""

    @classmethod
    def invalid_value(
        cls, env_var: str, value: str, constraint: str
    ) -> TrackerConfigError:
        """Return an error for an environment value outside its constraint."""
        return cls(f"Invalid {env_var} {value!r}. {constraint}")


class StoreError(TrackingError):
    """Raised when persisted state cannot be read or written."""

    @classmethod
    def corrupt(cls, location: str, detail: str) -> StoreError:
        """Return an error for a state document that does not decode."""
        return cls(f"stored state at {location} is unreadable: {detail}")
