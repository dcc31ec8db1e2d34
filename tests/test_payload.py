from __future__ import annotations

import json

import pytest

from lbsubmit.config import DEFAULT_LIMITS, Limits
from lbsubmit.payload import (
    FieldTooLong,
    PayloadTooLarge,
    PlayingNowSubmission,
    SerializationFailure,
    SingleSubmission,
    TooManyTags,
    build_submission,
    encode,
    encode_bytes,
)
from lbsubmit.state import SubmissionKind, Track


TRACK = Track(artist="rick astley", title="never gonna give you up",
              album="whenever you need somebody")
FIXED_CLOCK = lambda: 1700000000.7  # noqa: E731


def test_default_limits_match_listenbrainz_constants() -> None:
    assert DEFAULT_LIMITS.max_listen_size == 10240
    assert DEFAULT_LIMITS.max_items_per_get == 100
    assert DEFAULT_LIMITS.default_items_per_get == 25
    assert DEFAULT_LIMITS.max_tags_per_listen == 50
    assert DEFAULT_LIMITS.max_tag_size == 64


def test_playing_now_matches_wire_shape_exactly() -> None:
    assert encode(SubmissionKind.PLAYING_NOW, TRACK) == (
        '{"listen_type":"playing_now","payload":{"track_metadata":'
        '{"artist_name":"rick astley","track_name":"never gonna give you up",'
        '"release_name":"whenever you need somebody"}}}'
    )


def test_playing_now_has_no_listened_at_key() -> None:
    decoded = json.loads(encode(SubmissionKind.PLAYING_NOW, TRACK))
    assert decoded["listen_type"] == "playing_now"
    assert isinstance(decoded["payload"], dict)
    assert "listened_at" not in decoded["payload"]


def test_single_wraps_one_listen_with_timestamp() -> None:
    decoded = json.loads(encode(SubmissionKind.SINGLE, TRACK, clock=FIXED_CLOCK))
    assert decoded["listen_type"] == "single"
    assert isinstance(decoded["payload"], list)
    assert len(decoded["payload"]) == 1
    listen = decoded["payload"][0]
    assert listen["listened_at"] == 1700000000
    assert listen["track_metadata"] == {
        "artist_name": "rick astley",
        "track_name": "never gonna give you up",
        "release_name": "whenever you need somebody",
    }


def test_single_timestamp_is_taken_at_encode_time() -> None:
    calls = []

    def clock() -> float:
        calls.append(1)
        return 1234.0

    text = encode(SubmissionKind.SINGLE, TRACK, clock=clock)
    assert calls == [1]
    assert '"listened_at":1234,' in text


def test_encoding_is_deterministic_with_fixed_clock() -> None:
    for kind in SubmissionKind:
        first = encode(kind, TRACK, clock=FIXED_CLOCK)
        second = encode(kind, Track(TRACK.artist, TRACK.title, TRACK.album), clock=FIXED_CLOCK)
        assert first == second


def test_build_submission_picks_variant_class() -> None:
    single = build_submission(SubmissionKind.SINGLE, TRACK, clock=FIXED_CLOCK)
    playing = build_submission(SubmissionKind.PLAYING_NOW, TRACK)
    assert isinstance(single, SingleSubmission)
    assert isinstance(playing, PlayingNowSubmission)
    assert not hasattr(playing, "listened_at")


def test_empty_album_is_sent_as_empty_release_name() -> None:
    decoded = json.loads(encode(SubmissionKind.PLAYING_NOW, Track("a", "b")))
    assert decoded["payload"]["track_metadata"]["release_name"] == ""


def test_non_ascii_is_kept_and_counted_in_bytes() -> None:
    track = Track(artist="Björk", title="Jóga", album="Homogenic")
    text = encode(SubmissionKind.PLAYING_NOW, track)
    assert "Björk" in text
    assert encode_bytes(SubmissionKind.PLAYING_NOW, track) == text.encode("utf-8")


def _padded(kind: SubmissionKind, target: int) -> Track:
    unbounded = Limits(max_listen_size=10 ** 9)
    base = len(encode(kind, Track("a", "b", ""), clock=FIXED_CLOCK, limits=unbounded).encode("utf-8"))
    return Track("a", "b", "x" * (target - base))


@pytest.mark.parametrize("kind", list(SubmissionKind))
def test_size_exactly_at_limit_is_accepted(kind: SubmissionKind) -> None:
    track = _padded(kind, 10240)
    text = encode(kind, track, clock=FIXED_CLOCK)
    assert len(text.encode("utf-8")) == 10240


@pytest.mark.parametrize("kind", list(SubmissionKind))
def test_size_one_byte_over_limit_is_rejected(kind: SubmissionKind) -> None:
    track = _padded(kind, 10241)
    with pytest.raises(PayloadTooLarge) as exc:
        encode(kind, track, clock=FIXED_CLOCK)
    assert exc.value.size == 10241
    assert exc.value.limit == 10240


def test_limits_are_injectable() -> None:
    with pytest.raises(PayloadTooLarge):
        encode(SubmissionKind.PLAYING_NOW, TRACK, limits=Limits(max_listen_size=50))


def test_tags_are_emitted_under_additional_info() -> None:
    decoded = json.loads(encode(SubmissionKind.SINGLE, TRACK, tags=["pop", "80s"], clock=FIXED_CLOCK))
    meta = decoded["payload"][0]["track_metadata"]
    assert meta["additional_info"] == {"tags": ["pop", "80s"]}


def test_no_tags_means_no_additional_info() -> None:
    decoded = json.loads(encode(SubmissionKind.PLAYING_NOW, TRACK))
    assert "additional_info" not in decoded["payload"]["track_metadata"]


def test_too_many_tags_is_rejected() -> None:
    tags = [f"t{i}" for i in range(51)]
    with pytest.raises(TooManyTags):
        encode(SubmissionKind.PLAYING_NOW, TRACK, tags=tags)
    encode(SubmissionKind.PLAYING_NOW, TRACK, tags=tags[:50])


def test_tag_longer_than_limit_is_rejected() -> None:
    with pytest.raises(FieldTooLong) as exc:
        encode(SubmissionKind.PLAYING_NOW, TRACK, tags=["ok", "x" * 65])
    assert exc.value.field == "tags[1]"
    assert exc.value.length == 65
    encode(SubmissionKind.PLAYING_NOW, TRACK, tags=["x" * 64])


def test_lone_surrogate_is_a_serialization_failure() -> None:
    track = Track(artist="a", title="bad\udcff")
    with pytest.raises(SerializationFailure):
        encode(SubmissionKind.PLAYING_NOW, track)
    with pytest.raises(SerializationFailure):
        encode_bytes(SubmissionKind.SINGLE, track, clock=FIXED_CLOCK)
