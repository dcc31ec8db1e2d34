"""
Builds and serializes ListenBrainz submit-listens payloads.

Two shapes, chosen by SubmissionKind:

    single       {"listen_type":"single","payload":[{"listened_at":..,"track_metadata":{..}}]}
    playing_now  {"listen_type":"playing_now","payload":{"track_metadata":{..}}}

The playing_now listen has no listened_at key at all. Each shape is its own
class, so there is no optional field that could serialize as null.

Everything here is pure: no logging, no I/O. Size and tag limits are checked
before the JSON text is handed back; nothing is ever truncated.
"""

from __future__ import annotations
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Tuple

from lbsubmit.config import DEFAULT_LIMITS, Limits
from lbsubmit.state import SubmissionKind, Track

Clock = Callable[[], float]


# Error classes so callers can branch
class EncodingError(Exception): ...


class PayloadTooLarge(EncodingError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"serialized listen is {size} bytes, limit is {limit}")
        self.size = size
        self.limit = limit


class FieldTooLong(EncodingError):
    def __init__(self, field: str, length: int, limit: int):
        super().__init__(f"{field} is {length} characters, limit is {limit}")
        self.field = field
        self.length = length
        self.limit = limit


class TooManyTags(EncodingError):
    def __init__(self, count: int, limit: int):
        super().__init__(f"{count} tags given, limit is {limit}")
        self.count = count
        self.limit = limit


class SerializationFailure(EncodingError): ...


def track_metadata(track: Track, tags: Tuple[str, ...] = ()) -> Dict[str, Any]:
    meta: Dict[str, Any] = {
        "artist_name": track.artist,
        "track_name": track.title,
        "release_name": track.album,
    }
    if tags:
        meta["additional_info"] = {"tags": list(tags)}
    return meta


@dataclass(frozen=True)
class SingleSubmission:
    listened_at: int
    track: Track
    tags: Tuple[str, ...] = ()

    listen_type = SubmissionKind.SINGLE.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listen_type": self.listen_type,
            "payload": [{
                "listened_at": self.listened_at,
                "track_metadata": track_metadata(self.track, self.tags),
            }],
        }


@dataclass(frozen=True)
class PlayingNowSubmission:
    track: Track
    tags: Tuple[str, ...] = ()

    listen_type = SubmissionKind.PLAYING_NOW.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listen_type": self.listen_type,
            "payload": {
                "track_metadata": track_metadata(self.track, self.tags),
            },
        }


Submission = SingleSubmission | PlayingNowSubmission


def validate_tags(tags: Iterable[str], limits: Limits = DEFAULT_LIMITS) -> Tuple[str, ...]:
    tags = tuple(tags)
    if len(tags) > limits.max_tags_per_listen:
        raise TooManyTags(len(tags), limits.max_tags_per_listen)
    for i, tag in enumerate(tags):
        if len(tag) > limits.max_tag_size:
            raise FieldTooLong(f"tags[{i}]", len(tag), limits.max_tag_size)
    return tags


def build_submission(kind: SubmissionKind, track: Track, *, tags: Iterable[str] = (),
                     clock: Clock = time.time) -> Submission:
    """Build the envelope for kind. SINGLE is stamped with clock() at call time."""
    tags = tuple(tags)
    if kind is SubmissionKind.SINGLE:
        return SingleSubmission(listened_at=int(clock()), track=track, tags=tags)
    if kind is SubmissionKind.PLAYING_NOW:
        return PlayingNowSubmission(track=track, tags=tags)
    raise TypeError(f"unknown submission kind: {kind!r}")


def serialize(submission: Submission) -> bytes:
    """Compact UTF-8 JSON for submission. Unencodable text (lone surrogates) fails here."""
    try:
        text = json.dumps(submission.to_dict(), ensure_ascii=False, separators=(",", ":"))
        return text.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationFailure(str(e)) from e


def encode_bytes(kind: SubmissionKind, track: Track, *, tags: Iterable[str] = (),
                 clock: Clock = time.time, limits: Limits = DEFAULT_LIMITS) -> bytes:
    """Encode one listen as the submit-listens JSON bytes the transport sends.

    Raises TooManyTags / FieldTooLong for bad tags and PayloadTooLarge when the
    encoded body exceeds limits.max_listen_size (exactly the limit is fine).
    """
    tags = validate_tags(tags, limits)
    body = serialize(build_submission(kind, track, tags=tags, clock=clock))
    if len(body) > limits.max_listen_size:
        raise PayloadTooLarge(len(body), limits.max_listen_size)
    return body


def encode(kind: SubmissionKind, track: Track, **kwargs) -> str:
    """Same as encode_bytes(), returned as text."""
    return encode_bytes(kind, track, **kwargs).decode("utf-8")
