"""Real-time driver for the shared tick cursor."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QElapsedTimer, QObject, QTimer, Signal


DEFAULT_FPS = 30
DEFAULT_FRAME_INTERVAL_MS = 16


class PlaybackClock(QObject):
    """Advance the tick cursor in real time while playing or recording.

    The timer only runs while there is somewhere to go. While recording, the
    ``boundary_provider`` is asked every frame for the start of the next
    recorded segment; reaching it snaps the cursor there and emits
    ``boundary_reached`` so the owner can close the session.
    """

    tick_changed = Signal(float)
    playing_changed = Signal(bool)
    running_changed = Signal(bool)
    boundary_reached = Signal(float)

    def __init__(
        self,
        total_ticks: int,
        fps: float = DEFAULT_FPS,
        frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._total_ticks = max(0, int(total_ticks))
        self._fps = float(fps) if fps > 0 else float(DEFAULT_FPS)
        self._current_tick = 0.0
        self._is_playing = False
        self._recording_active = False
        self.boundary_provider: Callable[[], float | None] | None = None
        self._elapsed = QElapsedTimer()
        self._timer = QTimer(self)
        self._timer.setInterval(max(1, int(frame_interval_ms)))
        self._timer.timeout.connect(self._on_frame)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def fps(self) -> float:
        return self._fps

    @property
    def total_ticks(self) -> int:
        return self._total_ticks

    @property
    def current_tick(self) -> float:
        return self._current_tick

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def is_recording(self) -> bool:
        return self._recording_active

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    # ------------------------------------------------------------------
    # Playback control
    # ------------------------------------------------------------------
    def play(self) -> None:
        if self._is_playing:
            return
        if self._current_tick >= self._total_ticks:
            return
        self._is_playing = True
        self.playing_changed.emit(True)
        self._sync_timer()

    def pause(self) -> None:
        if not self._is_playing:
            return
        self._is_playing = False
        self.playing_changed.emit(False)
        self._sync_timer()

    def set_playing(self, playing: bool) -> None:
        if playing:
            self.play()
        else:
            self.pause()

    def toggle(self) -> None:
        self.set_playing(not self._is_playing)

    def set_recording_active(self, active: bool) -> None:
        active = bool(active)
        if active == self._recording_active:
            return
        self._recording_active = active
        self._sync_timer()

    def set_tick(self, tick: float) -> None:
        try:
            value = float(tick)
        except (TypeError, ValueError):
            return
        value = max(0.0, min(value, float(self._total_ticks)))
        if value == self._current_tick:
            return
        self._current_tick = value
        self.tick_changed.emit(value)
        self._sync_timer()

    def step_tick(self, delta: float) -> None:
        self.set_tick(self._current_tick + delta)

    # ------------------------------------------------------------------
    # Frame stepping
    # ------------------------------------------------------------------
    def advance(self, elapsed_ms: float) -> None:
        """Apply one frame worth of *elapsed_ms* real time."""

        if not (self._is_playing or self._recording_active):
            return
        next_tick = self._current_tick + elapsed_ms * self._fps / 1000.0

        if self._recording_active:
            boundary = self.boundary_provider() if self.boundary_provider else None
            if boundary is not None and next_tick >= boundary:
                self._recording_active = False
                self.set_tick(boundary)
                self._sync_timer()
                self.boundary_reached.emit(float(boundary))
                return

        if next_tick >= self._total_ticks:
            was_playing = self._is_playing
            self._is_playing = False
            self.set_tick(self._total_ticks)
            self._sync_timer()
            if was_playing:
                self.playing_changed.emit(False)
            return

        self.set_tick(next_tick)

    def _on_frame(self) -> None:
        self.advance(self._elapsed.restart())

    def _sync_timer(self) -> None:
        should_run = (
            (self._is_playing or self._recording_active)
            and self._current_tick < self._total_ticks
        )
        if should_run and not self._timer.isActive():
            self._elapsed.start()
            self._timer.start()
            self.running_changed.emit(True)
        elif not should_run and self._timer.isActive():
            self._timer.stop()
            self.running_changed.emit(False)
