from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

# ListenBrainz guideline: a play counts once the user has listened to half
# the track or 4 minutes of it, whichever is lower.
MAX_THRESHOLD = 240


# -------------------------
# Stateless identity for a track
# -------------------------
@dataclass(frozen=True)
class Track:
    artist: str
    title: str
    album: str = ""

    def __post_init__(self):
        if not self.artist or not self.artist.strip():
            raise ValueError("Track.artist must be non-empty")
        if not self.title or not self.title.strip():
            raise ValueError("Track.title must be non-empty")


class SubmissionKind(Enum):
    SINGLE = "single"
    PLAYING_NOW = "playing_now"


def submission_threshold(track_length: int) -> int:
    """Seconds of playback needed before a play counts as a listen.

    A zero length gives a threshold of 0, so any elapsed time is eligible.
    """
    if track_length < 0:
        raise ValueError(f"track length must be non-negative, got {track_length}")
    return min(track_length // 2, MAX_THRESHOLD)


def classify(elapsed: int, track_length: int) -> SubmissionKind | None:
    """Return SINGLE once the threshold is reached, None while not yet eligible.

    PLAYING_NOW is never decided here: callers send it on playback start.
    """
    if elapsed >= submission_threshold(track_length):
        return SubmissionKind.SINGLE
    return None


class PlaybackTracker:
    """Tracks playback state across polls and decides what to submit.

    A playing_now notice is due once per track while playing; a single
    listen is submitted at most once per Track, after the threshold.
    """

    def __init__(self):
        self.current: Track | None = None
        self.length: int | None = None
        self.announced: bool = False
        self.submitted: bool = False
        self.elapsed: int = 0
        self.state: str | None = None  # 'play', 'pause', 'stop'

    def update(self, *, track: Track | None, state: str | None, elapsed: int | None,
               length: int | None = None):
        # A poll without metadata is not a track change
        if track is None:
            self.state = state
            return

        # Reset progress on track change
        if track != self.current:
            self.current = track
            self.announced = False
            self.submitted = False
            self.elapsed = 0

        self.length = length
        self.state = state
        if elapsed is not None:
            self.elapsed = max(self.elapsed, int(elapsed))

    def threshold(self) -> int:
        # Unknown duration: fall back to the 4 minute cap
        if self.length is None:
            return MAX_THRESHOLD
        return submission_threshold(self.length)

    def should_announce(self) -> bool:
        if not self.current or self.state != "play":
            return False
        return not self.announced

    def mark_announced(self):
        self.announced = True

    def should_submit(self) -> bool:
        if not self.current:
            return False
        if self.submitted:
            return False
        if self.state != "play":
            return False
        return self.elapsed >= self.threshold()

    def mark_submitted(self):
        self.submitted = True
