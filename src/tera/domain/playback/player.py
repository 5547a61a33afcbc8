"""
MPV stream player for Tera
Supervises one mpv process at a time and talks to it over JSON IPC
"""

import itertools
import json
import os
import shutil
import socket
import subprocess
import tempfile
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from loguru import logger

from tera.core.config import PlayerConfig
from tera.domain.stations.models import Station

from .exceptions import PlayerUnavailableError, ProcessSpawnError

# Now-playing titles kept per session
MAX_TRACK_HISTORY = 5

# Shorter titles are usually the station name, not a song
MIN_TRACK_TITLE_LENGTH = 3

_socket_counter = itertools.count(1)


class PlayerStatus(Enum):
    IDLE = "idle"
    STARTING = "starting"
    PLAYING = "playing"
    STOPPING = "stopping"


@dataclass
class PlaybackSession:
    """One running mpv process bound to one station."""

    process: subprocess.Popen
    station: Station
    socket_path: str
    stop_event: threading.Event = field(default_factory=threading.Event)


def clamp_volume(volume: int) -> int:
    return max(0, min(100, int(volume)))


def new_socket_path() -> str:
    """Unique IPC socket path for a new session."""
    temp_dir = tempfile.gettempdir()
    return os.path.join(temp_dir, f"tera-mpv-{os.getpid()}-{next(_socket_counter)}.sock")


def build_mpv_command(
    binary: str,
    url: str,
    volume: int,
    socket_path: str,
    config: PlayerConfig,
) -> list[str]:
    """Build the mpv argv for audio-only, non-interactive stream playback."""
    cmd = [
        binary,
        "--no-video",
        "--no-terminal",
        "--really-quiet",
        f"--volume={volume}",
        f"--input-ipc-server={socket_path}",
    ]

    if config.auto_reconnect:
        # Force loop retries after the stream drops; lavf handles socket reconnects
        cmd.append("--loop-playlist=force")
        cmd.append(
            f"--stream-lavf-o=reconnect_streamed=1,reconnect_delay_max={config.reconnect_delay}"
        )

    if config.stream_buffer_mb > 0:
        cmd.extend(["--cache=yes", f"--demuxer-max-bytes={config.stream_buffer_mb}M"])
    else:
        cmd.append("--no-cache")

    cmd.append(url)
    return cmd


def _mpv_request(socket_path: Optional[str], command: list[Any]) -> Optional[dict[str, Any]]:
    """Send one JSON IPC command and return mpv's reply, or None."""
    if not socket_path or not os.path.exists(socket_path):
        return None

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(0.5)
            sock.connect(socket_path)
            sock.sendall((json.dumps({"command": command}) + "\n").encode("utf-8"))
            response = sock.recv(4096).decode("utf-8", errors="replace")
    except OSError:
        return None

    # mpv may interleave event lines with the reply
    for line in response.splitlines():
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict) and "error" in data:
            return data
    return None


def send_mpv_command(socket_path: Optional[str], command: list[Any]) -> bool:
    """Send JSON IPC command to MPV."""
    reply = _mpv_request(socket_path, command)
    return reply is not None and reply.get("error") == "success"


def get_mpv_property(socket_path: Optional[str], property_name: str) -> Any:
    """Get a property value from MPV."""
    reply = _mpv_request(socket_path, ["get_property", property_name])
    if reply is not None and reply.get("error") == "success":
        return reply.get("data")
    return None


class StreamPlayer:
    """Plays one station at a time through an external mpv process.

    `play()` and `stop()` are serialized by a command lock; status reads use
    a separate short-lived state lock so they never wait on process exit.
    Each session has a watcher thread that returns the player to IDLE when
    mpv exits on its own; a session's stop event tells the watcher the exit
    was requested, so only one side performs the transition.
    """

    def __init__(self, config: Optional[PlayerConfig] = None):
        self.config = config or PlayerConfig()

        self._command_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._status = PlayerStatus.IDLE
        self._session: Optional[PlaybackSession] = None

        self._volume = clamp_volume(self.config.default_volume)
        self._last_volume = self._volume or 100  # Restored on unmute
        self._muted = self._volume == 0

        self._track_lock = threading.Lock()
        self._track_history: list[str] = []
        self._current_track = ""

    # Session lifecycle

    def play(self, station: Station) -> None:
        """Start playing a station, stopping any current playback first.

        Raises:
            PlayerUnavailableError: mpv is not installed
            ProcessSpawnError: mpv could not be started
        """
        if station is None:
            raise ValueError("station cannot be None")

        with self._command_lock:
            self._stop_session()

            binary = shutil.which(self.config.mpv_binary)
            if binary is None:
                logger.error(f"Player binary not found: {self.config.mpv_binary}")
                raise PlayerUnavailableError(self.config.mpv_binary)

            with self._state_lock:
                volume = self._volume if station.volume is None else station.volume
                volume = clamp_volume(volume)
                self._volume = volume
                if volume > 0:
                    self._last_volume = volume
                self._muted = volume == 0
                self._status = PlayerStatus.STARTING

            socket_path = new_socket_path()
            _remove_socket(socket_path)
            cmd = build_mpv_command(
                binary, station.url_resolved, volume, socket_path, self.config
            )

            try:
                process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except (OSError, subprocess.SubprocessError) as e:
                with self._state_lock:
                    self._status = PlayerStatus.IDLE
                logger.error(f"Failed to start mpv for {station.station_uuid}: {e}")
                raise ProcessSpawnError(f"Failed to start mpv: {e}") from e

            session = PlaybackSession(
                process=process, station=station, socket_path=socket_path
            )
            with self._state_lock:
                self._session = session
                self._status = PlayerStatus.PLAYING

            threading.Thread(
                target=self._watch,
                args=(session,),
                daemon=True,
                name="MPVWatcher",
            ).start()
            threading.Thread(
                target=self._poll_metadata,
                args=(session,),
                daemon=True,
                name="MPVMetadata",
            ).start()

            logger.info(
                f"Playing {station.trim_name()} ({station.station_uuid}) "
                f"pid={process.pid} volume={volume}"
            )

    def stop(self) -> None:
        """Stop playback and wait for mpv to exit. No-op when idle."""
        with self._command_lock:
            self._stop_session()

    def _stop_session(self) -> bool:
        # Caller must hold the command lock
        with self._state_lock:
            session = self._session
            if session is None:
                return False
            session.stop_event.set()
            self._status = PlayerStatus.STOPPING

        self._terminate(session.process)
        _remove_socket(session.socket_path)

        with self._state_lock:
            self._session = None
            self._status = PlayerStatus.IDLE
        self._clear_track_history()

        logger.info(f"Stopped {session.station.station_uuid}")
        return True

    def _terminate(self, process: subprocess.Popen) -> None:
        try:
            process.terminate()
        except OSError as e:
            # Already exited
            logger.debug(f"terminate() on finished mpv pid={process.pid}: {e}")

        try:
            process.wait(timeout=self.config.stop_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(
                f"mpv pid={process.pid} ignored SIGTERM for {self.config.stop_timeout}s, killing"
            )
            try:
                process.kill()
            except OSError:
                pass
            process.wait()

    def _watch(self, session: PlaybackSession) -> None:
        returncode = session.process.wait()

        with self._state_lock:
            if session.stop_event.is_set() or self._session is not session:
                return
            # Unrequested exit: crash or end of stream
            session.stop_event.set()
            self._session = None
            self._status = PlayerStatus.IDLE

        _remove_socket(session.socket_path)
        self._clear_track_history()
        logger.warning(
            f"mpv exited on its own (code {returncode}) while playing "
            f"{session.station.station_uuid}"
        )

    # Status

    def status(self) -> PlayerStatus:
        with self._state_lock:
            return self._status

    def is_playing(self) -> bool:
        """Whether a station is currently playing."""
        with self._state_lock:
            return self._status is PlayerStatus.PLAYING

    def current_station(self) -> Optional[Station]:
        """The currently playing station, or None."""
        with self._state_lock:
            if self._status is not PlayerStatus.PLAYING or self._session is None:
                return None
            return self._session.station

    def _socket_path(self) -> Optional[str]:
        with self._state_lock:
            return self._session.socket_path if self._session else None

    # Volume

    def get_volume(self) -> int:
        with self._state_lock:
            return self._volume

    def is_muted(self) -> bool:
        with self._state_lock:
            return self._muted

    def set_volume(self, volume: int) -> int:
        """Set the volume (clamped to 0-100) with immediate effect."""
        with self._state_lock:
            volume = clamp_volume(volume)
            if volume > 0:
                self._last_volume = volume
            self._volume = volume
            self._muted = volume == 0
        self._apply_volume(volume)
        return volume

    def increase_volume(self, amount: int) -> int:
        with self._state_lock:
            self._volume = clamp_volume(self._volume + amount)
            self._muted = False
            if self._volume > 0:
                self._last_volume = self._volume
            volume = self._volume
        self._apply_volume(volume)
        return volume

    def decrease_volume(self, amount: int) -> int:
        with self._state_lock:
            self._volume = clamp_volume(self._volume - amount)
            self._muted = self._volume == 0
            if self._volume > 0:
                self._last_volume = self._volume
            volume = self._volume
        self._apply_volume(volume)
        return volume

    def toggle_mute(self) -> tuple[bool, int]:
        """Mute, or restore the volume from before muting.

        Also serves as pause/resume for live streams.

        Returns:
            Tuple of (muted, volume)
        """
        with self._state_lock:
            if self._muted:
                self._volume = self._last_volume or 100
                self._muted = False
            else:
                if self._volume > 0:
                    self._last_volume = self._volume
                self._volume = 0
                self._muted = True
            muted, volume = self._muted, self._volume
        self._apply_volume(volume)
        return muted, volume

    def _apply_volume(self, volume: int) -> None:
        socket_path = self._socket_path()
        if socket_path and not send_mpv_command(
            socket_path, ["set_property", "volume", float(volume)]
        ):
            logger.debug(f"Could not send volume={volume} to mpv")

    # Stream metadata

    def get_audio_bitrate(self) -> Optional[int]:
        """Current audio bitrate reported by mpv, if known."""
        value = get_mpv_property(self._socket_path(), "audio-bitrate")
        if isinstance(value, (int, float)):
            return int(value)
        return None

    def current_track(self) -> str:
        with self._track_lock:
            return self._current_track

    def get_track_history(self) -> list[str]:
        """Last few track titles, newest first."""
        with self._track_lock:
            return list(self._track_history)

    def _poll_metadata(self, session: PlaybackSession) -> None:
        while not session.stop_event.wait(self.config.metadata_poll_interval):
            title = get_mpv_property(session.socket_path, "media-title")
            if isinstance(title, str) and title:
                self._add_to_track_history(session, title)

    def _add_to_track_history(self, session: PlaybackSession, track: str) -> None:
        with self._track_lock:
            if session.stop_event.is_set():
                return
            if track == self._current_track or len(track) < MIN_TRACK_TITLE_LENGTH:
                return
            self._current_track = track
            self._track_history.insert(0, track)
            del self._track_history[MAX_TRACK_HISTORY:]
        logger.debug(f"Now playing: {track}")

    def _clear_track_history(self) -> None:
        with self._track_lock:
            self._track_history = []
            self._current_track = ""


def _remove_socket(socket_path: Optional[str]) -> None:
    if socket_path and os.path.exists(socket_path):
        try:
            os.unlink(socket_path)
        except OSError:
            pass
