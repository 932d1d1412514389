"""
Errors
======

Exception hierarchy for the plank tracker core.
"""


class PlankTrackerError(Exception):
    """Base class for all plank tracker errors."""


class TimerError(PlankTrackerError):
    """A session timer request was rejected.

    The message is meant to be shown to the user as-is.
    """


class AcknowledgementRequiredError(TimerError):
    """Start requested before the no-cheating vow was given."""

    def __init__(self, message: str = "You must swear you won't cheat before you start!"):
        super().__init__(message)


class InvalidTargetError(TimerError):
    """Countdown target is missing, zero or out of range."""

    def __init__(self, message: str = "Please set a positive timer."):
        super().__init__(message)


class InvalidTransitionError(TimerError):
    """Request is not allowed in the current timer state."""


class CameraError(PlankTrackerError):
    """Camera could not be opened or changed."""
