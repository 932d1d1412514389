"""
Session Controller Module
=========================

Owns everything belonging to one plank session: the timer, the snapshot
capturer, the camera source, pending notifications and the save result.

Classes:
    SessionTicker: Background thread calling a function at a fixed interval
    SessionController: One session's lifecycle
    SessionRegistry: Thread-safe map of live sessions
"""

import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional

from ..core import (
    CameraError,
    InvalidTransitionError,
    SessionTimer,
    SnapshotCapturer,
    TimerError,
    TimerMode,
)
from ..utils import LatestFrameSource
from .notifications import Notifier
from .recorder import RecordResult, SessionRecorder

logger = logging.getLogger(__name__)

CAMERA_LOCKED = "The camera cannot be changed while planking."


class SessionTicker:
    """
    Calls ``callback`` every ``interval`` seconds until stopped.

    Attributes:
        interval (float): Seconds between calls
    """

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._stop = threading.Event()
        self.thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self.thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Session tick failed")
                break

    def stop(self, wait: bool = False) -> None:
        """Stop the loop, optionally waiting for the thread to exit."""
        self._stop.set()
        if wait and self.thread.is_alive() and threading.current_thread() is not self.thread:
            self.thread.join(timeout=2.0)

    @property
    def running(self) -> bool:
        return self.thread.is_alive() and not self._stop.is_set()


class SessionController:
    """
    Lifecycle of one plank session.

    Timer rule violations raise ``TimerError`` subclasses after being added
    to the session's notifications.

    Attributes:
        session_id (str): Registry key
        timer (SessionTimer): Stopwatch / countdown state machine
        capturer (SnapshotCapturer): Evidence snapshots
        notifier (Notifier): Pending user-facing messages
        result (RecordResult): Outcome of the last save, if any
        saving (bool): Whether a save is in flight
    """

    def __init__(self, session_id: str, recorder: SessionRecorder,
                 access_token: Optional[str] = None, tick_seconds: float = 1.0,
                 snapshot_interval: int = 10, snapshot_retention: int = 3,
                 snapshot_format: str = ".png", auto_tick: bool = True):
        self.session_id = session_id
        self.recorder = recorder
        self.access_token = access_token
        self.tick_seconds = tick_seconds
        self.auto_tick = auto_tick
        self.timer = SessionTimer()
        self.capturer = SnapshotCapturer(snapshot_interval, snapshot_retention, snapshot_format)
        self.notifier = Notifier()
        self.result: Optional[RecordResult] = None
        self.saving = False
        self._lock = threading.RLock()
        self._ticker: Optional[SessionTicker] = None
        self._pending_duration: Optional[int] = None
        self._generation = 0
        self.timer.on_complete(self._on_complete)

    # -- ticker ------------------------------------------------------------

    def _start_ticker(self) -> None:
        if not self.auto_tick:
            return
        self._stop_ticker()
        ticker = SessionTicker(self.tick_seconds, lambda: self._tick_from(ticker))
        self._ticker = ticker
        ticker.start()

    def _stop_ticker(self) -> Optional[SessionTicker]:
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.stop()
        return ticker

    def _tick_from(self, ticker: SessionTicker) -> None:
        # a ticker replaced by pause/resume must not tick the new run
        with self._lock:
            if ticker is not self._ticker:
                return
            self._advance()
        self._save_pending()

    def _advance(self) -> None:
        if not self.timer.active:
            self._stop_ticker()
            return
        self.timer.tick()
        self.capturer.tick(1)

    # -- timer callbacks ---------------------------------------------------

    def _on_complete(self, timer: SessionTimer) -> None:
        self.capturer.end()
        self._stop_ticker()
        self._pending_duration = timer.duration

    def _save_pending(self) -> None:
        with self._lock:
            duration, self._pending_duration = self._pending_duration, None
            if duration is None:
                return
            snapshots = self.capturer.snapshots
            token = self.access_token
            generation = self._generation
            self.saving = True
        try:
            result = self.recorder.record(token, duration, snapshots, self.notifier)
        finally:
            with self._lock:
                self.saving = False
        with self._lock:
            # a reset during the save starts a new run
            if generation == self._generation:
                self.result = result

    def _guarded(self, action: Callable[[], Any]) -> Any:
        try:
            return action()
        except (TimerError, CameraError) as e:
            self.notifier.error(str(e))
            raise

    def _reject(self, message: str) -> None:
        self.notifier.error(message)
        raise InvalidTransitionError(message)

    # -- operations --------------------------------------------------------

    def set_access_token(self, access_token: Optional[str]) -> None:
        if access_token:
            with self._lock:
                self.access_token = access_token

    def set_mode(self, mode: TimerMode) -> None:
        with self._lock:
            self._guarded(lambda: self.timer.set_mode(mode))

    def configure_countdown(self, minutes: int, seconds: int) -> None:
        with self._lock:
            self._guarded(lambda: self.timer.configure_countdown(minutes, seconds))

    def acknowledge(self, value: bool = True) -> None:
        with self._lock:
            self.timer.acknowledge(value)

    def enable_camera(self, factory: Optional[Callable[[], Any]] = None) -> Any:
        """
        Grant a camera source.

        Args:
            factory: Builds the frame source; a client-fed source by default

        Returns:
            The attached source
        """
        with self._lock:
            if self.timer.active:
                self._reject(CAMERA_LOCKED)
            source = self._guarded(factory or LatestFrameSource)
            old = self.capturer.detach()
            if old is not None:
                old.release()
            self.capturer.attach(source)
            return source

    def disable_camera(self) -> None:
        with self._lock:
            if self.timer.active:
                self._reject(CAMERA_LOCKED)
            source = self.capturer.detach()
            if source is not None:
                source.release()

    def push_frame(self, frame) -> None:
        """Store a frame posted by the client camera."""
        with self._lock:
            source = self.capturer.source
            if not isinstance(source, LatestFrameSource):
                raise CameraError("Client camera is not enabled for this session.")
            source.set_frame(frame)

    def start(self) -> None:
        with self._lock:
            self._guarded(self.timer.start)
            self.result = None
            self.capturer.begin()
            self._start_ticker()

    def pause(self) -> None:
        with self._lock:
            self._guarded(self.timer.pause)
            self.capturer.end()
            self._stop_ticker()

    def finish(self) -> None:
        with self._lock:
            self._guarded(self.timer.finish)
        self._save_pending()

    def tick(self) -> None:
        """Advance the session by one second."""
        with self._lock:
            self._advance()
        self._save_pending()

    def reset(self) -> None:
        with self._lock:
            self._generation += 1
            self._stop_ticker()
            self.timer.reset()
            self.capturer.end()
            self.capturer.clear()
            source = self.capturer.detach()
            if source is not None:
                source.release()
            self.result = None
            self._pending_duration = None

    def close(self) -> None:
        """Tear down: stop ticking and release the camera."""
        with self._lock:
            ticker = self._stop_ticker()
            self.capturer.end()
            source = self.capturer.detach()
            if source is not None:
                source.release()
        if ticker is not None:
            ticker.stop(wait=True)

    @property
    def busy(self) -> bool:
        """Whether the session is running or saving."""
        with self._lock:
            return self.timer.active or self.saving

    def to_dict(self) -> dict:
        with self._lock:
            data = self.timer.to_dict()
            data.update({
                "session_id": self.session_id,
                "camera_enabled": self.capturer.camera_enabled,
                "snapshots": len(self.capturer.snapshots),
                "saving": self.saving,
                "result": None,
            })
            if self.result is not None:
                data["result"] = {
                    "saved": self.result.saved,
                    "plank_id": self.result.session.id if self.result.session else None,
                    "photos": list(self.result.photos),
                    "failed_uploads": self.result.failed_uploads,
                }
            return data


class SessionRegistry:
    """
    Thread-safe registry of live sessions.

    Sessions that are neither running nor saving and have not been looked up
    for ``ttl`` seconds are closed and dropped whenever a new one is created.

    Usage:
        registry = SessionRegistry(lambda sid, token: SessionController(sid, recorder, token))
        controller = registry.create(token)
    """

    def __init__(self, factory: Callable[[str, Optional[str]], SessionController],
                 ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._factory = factory
        self.ttl = ttl
        self._clock = clock
        self._sessions: Dict[str, SessionController] = {}
        self._touched: Dict[str, float] = {}
        self._lock = threading.Lock()

    def create(self, access_token: Optional[str] = None) -> SessionController:
        self.sweep()
        session_id = uuid.uuid4().hex
        controller = self._factory(session_id, access_token)
        with self._lock:
            self._sessions[session_id] = controller
            self._touched[session_id] = self._clock()
        return controller

    def get(self, session_id: str) -> Optional[SessionController]:
        with self._lock:
            controller = self._sessions.get(session_id)
            if controller is not None:
                self._touched[session_id] = self._clock()
            return controller

    def remove(self, session_id: str) -> bool:
        with self._lock:
            controller = self._sessions.pop(session_id, None)
            self._touched.pop(session_id, None)
        if controller is None:
            return False
        controller.close()
        return True

    def sweep(self) -> int:
        """
        Close sessions left idle for longer than the TTL.

        Returns:
            Number of sessions evicted
        """
        if self.ttl is None:
            return 0
        cutoff = self._clock() - self.ttl
        with self._lock:
            stale = [
                session_id for session_id, touched in self._touched.items()
                if touched < cutoff and not self._sessions[session_id].busy
            ]
            evicted = [self._sessions.pop(session_id) for session_id in stale]
            for session_id in stale:
                del self._touched[session_id]
        for controller in evicted:
            logger.info("Evicting idle session %s", controller.session_id)
            controller.close()
        return len(evicted)

    def close_all(self) -> None:
        with self._lock:
            controllers = list(self._sessions.values())
            self._sessions.clear()
            self._touched.clear()
        for controller in controllers:
            controller.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
