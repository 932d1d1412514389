"""
Session Timer Module
====================

State machine for a single plank session.

States:
    IDLE -> (CONFIGURING_COUNTDOWN) -> ACTIVE <-> PAUSED -> COMPLETED

Usage:
    timer = SessionTimer(TimerMode.COUNTDOWN)
    timer.configure_countdown(minutes=1, seconds=30)
    timer.acknowledge()
    timer.start()
    while not timer.tick():
        ...
"""

from enum import Enum
from typing import Callable, List, Optional

from .errors import (
    AcknowledgementRequiredError,
    InvalidTargetError,
    InvalidTransitionError,
)


class TimerMode(str, Enum):
    STOPWATCH = "stopwatch"
    COUNTDOWN = "countdown"


class TimerState(str, Enum):
    IDLE = "idle"
    CONFIGURING_COUNTDOWN = "configuring_countdown"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


_NOT_STARTED = (TimerState.IDLE, TimerState.CONFIGURING_COUNTDOWN)


class SessionTimer:
    """
    Stopwatch / countdown timer for one plank session.

    The timer does not own a clock; something calls ``tick()`` once per
    second while it is active.

    Attributes:
        mode (TimerMode): Stopwatch or countdown
        state (TimerState): Current state
        seconds (int): Elapsed seconds (stopwatch) or remaining seconds (countdown)
        target (int): Configured countdown length in seconds
        acknowledged (bool): Whether the no-cheating vow was given
    """

    def __init__(self, mode: TimerMode = TimerMode.STOPWATCH):
        self.mode = TimerMode(mode)
        self.state = TimerState.IDLE
        self.seconds = 0
        self.target = 0
        self.acknowledged = False
        self._listeners: List[Callable[["SessionTimer"], None]] = []

    @property
    def active(self) -> bool:
        return self.state == TimerState.ACTIVE

    @property
    def completed(self) -> bool:
        return self.state == TimerState.COMPLETED

    @property
    def duration(self) -> int:
        """Duration to record: the configured target for countdowns, elapsed time otherwise."""
        if self.mode == TimerMode.COUNTDOWN:
            return self.target
        return self.seconds

    def on_complete(self, listener: Callable[["SessionTimer"], None]) -> None:
        """Register a callback invoked once each time the session completes."""
        self._listeners.append(listener)

    def set_mode(self, mode: TimerMode) -> None:
        """Switch between stopwatch and countdown before the session starts."""
        mode = TimerMode(mode)
        if self.state not in _NOT_STARTED:
            raise InvalidTransitionError("Mode can only be changed before the session starts.")
        self.mode = mode
        self.state = TimerState.IDLE
        self.target = 0
        self.seconds = 0

    def configure_countdown(self, minutes: int, seconds: int) -> None:
        """
        Set the countdown length.

        Args:
            minutes: Whole minutes, >= 0
            seconds: Whole seconds, 0..59
        """
        if self.mode != TimerMode.COUNTDOWN:
            raise InvalidTransitionError("Switch to timer mode to set a countdown.")
        if self.state not in _NOT_STARTED:
            raise InvalidTransitionError("Countdown can only be set before the session starts.")
        minutes = int(minutes)
        seconds = int(seconds)
        if minutes < 0 or not 0 <= seconds <= 59:
            raise InvalidTargetError("Minutes must be >= 0 and seconds between 0 and 59.")
        self.target = minutes * 60 + seconds
        self.seconds = self.target
        self.state = TimerState.CONFIGURING_COUNTDOWN

    def acknowledge(self, value: bool = True) -> None:
        """Record the no-cheating vow."""
        self.acknowledged = bool(value)

    def start(self) -> None:
        """Start a new session or resume a paused one."""
        if self.state not in _NOT_STARTED and self.state != TimerState.PAUSED:
            raise InvalidTransitionError(f"Cannot start while {self.state.value}.")
        if not self.acknowledged:
            raise AcknowledgementRequiredError()
        if self.state == TimerState.PAUSED:
            self.state = TimerState.ACTIVE
            return
        if self.mode == TimerMode.COUNTDOWN:
            if self.target <= 0:
                raise InvalidTargetError()
            self.seconds = self.target
        else:
            self.seconds = 0
        self.state = TimerState.ACTIVE

    def pause(self) -> None:
        """Pause a running stopwatch."""
        if self.mode != TimerMode.STOPWATCH:
            raise InvalidTransitionError("A countdown cannot be paused.")
        if self.state != TimerState.ACTIVE:
            raise InvalidTransitionError(f"Cannot pause while {self.state.value}.")
        self.state = TimerState.PAUSED

    def tick(self) -> bool:
        """
        Advance the timer by one second.

        Returns:
            True if this tick completed the session
        """
        if self.state != TimerState.ACTIVE:
            return False
        if self.mode == TimerMode.STOPWATCH:
            self.seconds += 1
            return False
        self.seconds = max(self.seconds - 1, 0)
        if self.seconds == 0:
            self._complete()
            return True
        return False

    def finish(self) -> None:
        """Finalize a stopwatch session."""
        if self.mode != TimerMode.STOPWATCH:
            raise InvalidTransitionError("A countdown finishes on its own.")
        if self.state not in (TimerState.ACTIVE, TimerState.PAUSED):
            raise InvalidTransitionError(f"Cannot finish while {self.state.value}.")
        if self.seconds <= 0:
            raise InvalidTransitionError("Nothing to save yet.")
        self._complete()

    def reset(self) -> None:
        """Return to IDLE, dropping the target and the vow."""
        self.state = TimerState.IDLE
        self.seconds = 0
        self.target = 0
        self.acknowledged = False

    def _complete(self) -> None:
        self.state = TimerState.COMPLETED
        self.seconds = self.duration
        for listener in list(self._listeners):
            listener(self)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "state": self.state.value,
            "seconds": self.seconds,
            "target": self.target,
            "acknowledged": self.acknowledged,
            "active": self.active,
            "completed": self.completed,
        }
