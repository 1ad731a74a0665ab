from PySide6.QtCore import QObject
import configparser
import logging

from playmaker.core.playback_clock import DEFAULT_FPS, DEFAULT_FRAME_INTERVAL_MS
from playmaker.core.track import DEFAULT_MIN_SEGMENT_TICKS
from playmaker.core.undo import DEFAULT_HISTORY_LIMIT


_log = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = 'settings.ini'


class SettingsController(QObject):
    """Loads and saves timeline configuration from an INI file."""

    DEFAULT_TIMELINE_SETTINGS = {
        "fps": DEFAULT_FPS,
        "duration_seconds": 30,
        "min_segment_ticks": DEFAULT_MIN_SEGMENT_TICKS,
        "frame_interval_ms": DEFAULT_FRAME_INTERVAL_MS,
        "tick_px": 4,
    }

    DEFAULT_HISTORY_SETTINGS = {
        "limit": DEFAULT_HISTORY_LIMIT,
    }

    def __init__(self, path=DEFAULT_SETTINGS_PATH):
        super().__init__()
        self.path = path
        self.config = configparser.ConfigParser()
        self.config.read(self.path)

        if not self.config.has_section('Timeline'):
            self.config.add_section('Timeline')
        self.fps = self._get_int('Timeline', 'fps', self.DEFAULT_TIMELINE_SETTINGS["fps"])
        self.duration_seconds = self._get_int(
            'Timeline', 'duration_seconds', self.DEFAULT_TIMELINE_SETTINGS["duration_seconds"]
        )
        self.min_segment_ticks = self._get_int(
            'Timeline', 'min_segment_ticks', self.DEFAULT_TIMELINE_SETTINGS["min_segment_ticks"]
        )
        self.frame_interval_ms = self._get_int(
            'Timeline', 'frame_interval_ms', self.DEFAULT_TIMELINE_SETTINGS["frame_interval_ms"]
        )
        self.tick_px = self._get_int('Timeline', 'tick_px', self.DEFAULT_TIMELINE_SETTINGS["tick_px"])
        self._sync_timeline_settings_to_config()

        if not self.config.has_section('History'):
            self.config.add_section('History')
        self.history_limit = self._get_int(
            'History', 'limit', self.DEFAULT_HISTORY_SETTINGS["limit"]
        )
        self._sync_history_settings_to_config()

    @property
    def total_ticks(self):
        return int(self.fps * self.duration_seconds)

    def save_settings(self):
        """Persist settings to disk."""
        self._sync_timeline_settings_to_config()
        self._sync_history_settings_to_config()
        try:
            with open(self.path, 'w') as configfile:
                self.config.write(configfile)
        except OSError as e:
            _log.warning("Could not write %s: %s", self.path, e)
            return False
        return True

    def _get_int(self, section, option, fallback):
        try:
            return max(1, self.config.getint(section, option))
        except (configparser.NoOptionError, ValueError):
            return fallback

    def _sync_timeline_settings_to_config(self):
        if not self.config.has_section('Timeline'):
            self.config.add_section('Timeline')
        self.config.set('Timeline', 'fps', str(int(self.fps)))
        self.config.set('Timeline', 'duration_seconds', str(int(self.duration_seconds)))
        self.config.set('Timeline', 'min_segment_ticks', str(int(self.min_segment_ticks)))
        self.config.set('Timeline', 'frame_interval_ms', str(int(self.frame_interval_ms)))
        self.config.set('Timeline', 'tick_px', str(int(self.tick_px)))

    def _sync_history_settings_to_config(self):
        if not self.config.has_section('History'):
            self.config.add_section('History')
        self.config.set('History', 'limit', str(int(self.history_limit)))

    def get_timeline_settings(self):
        return {
            'fps': int(self.fps),
            'duration_seconds': int(self.duration_seconds),
            'min_segment_ticks': int(self.min_segment_ticks),
            'frame_interval_ms': int(self.frame_interval_ms),
            'tick_px': int(self.tick_px),
        }

    def get_history_settings(self):
        return {
            'limit': int(self.history_limit),
        }

    def get_default_timeline_settings(self):
        return dict(self.DEFAULT_TIMELINE_SETTINGS)

    def update_timeline_settings(self, *, fps=None, duration_seconds=None, tick_px=None):
        """Change timeline settings; the new length applies to the next session."""
        if fps is not None:
            self.fps = self._coerce_positive_int(fps, self.fps)
        if duration_seconds is not None:
            self.duration_seconds = self._coerce_positive_int(duration_seconds, self.duration_seconds)
        if tick_px is not None:
            self.tick_px = self._coerce_positive_int(tick_px, self.tick_px)
        self._sync_timeline_settings_to_config()

    def update_history_settings(self, *, limit=None):
        if limit is not None:
            self.history_limit = self._coerce_positive_int(limit, self.history_limit)
        self._sync_history_settings_to_config()

    @staticmethod
    def _coerce_positive_int(value, fallback):
        try:
            return max(1, int(value))
        except (TypeError, ValueError):
            return fallback
