import logging
import time

from lbsubmit import config
from lbsubmit.listenbrainz_client import ListenBrainzClient, TransportError
from lbsubmit.payload import EncodingError, encode_bytes
from lbsubmit.state import PlaybackTracker, SubmissionKind, Track

log = logging.getLogger("lbsubmit")

DEMO_TRACK = Track(
    artist="rick astley",
    title="never gonna give you up",
    album="whenever you need somebody",
)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,  # ensure our config is used even if libs pre-configure logging
    )


def _send(client: ListenBrainzClient | None, kind: SubmissionKind, track: Track, *,
          limits: config.Limits, clock) -> str | None:
    try:
        body = encode_bytes(kind, track, clock=clock, limits=limits)
    except EncodingError as e:
        # Caller has to shrink the metadata; nothing we can do here
        log.error("Cannot encode %s for %s - %s: %s", kind.value, track.artist, track.title, e)
        return None

    if client is None:
        log.info("Dry run, %s payload: %s", kind.value, body.decode("utf-8"))
        return None

    try:
        response = client.deliver(body)
    except TransportError as e:
        log.warning("Delivering %s failed: %s", kind.value, e)
        return None
    log.info("Sent %s: %s — %s%s", kind.value, track.artist, track.title,
             f" [{track.album}]" if track.album else "")
    return response


def submit_play(client: ListenBrainzClient | None, tracker: PlaybackTracker, track: Track | None,
                *, state: str | None, elapsed: int | None, length: int | None,
                limits: config.Limits = config.DEFAULT_LIMITS, clock=time.time) -> list[str]:
    """One poll step: playing_now on track start, single once the threshold is crossed.

    A None client means dry run: payloads are encoded and logged, never sent.
    Returns the response bodies of whatever was delivered.
    """
    tracker.update(track=track, state=state, elapsed=elapsed, length=length)
    responses = []

    if track is None or state != "play":
        log.debug("Playback not in 'play' state or missing metadata; skipping.")
        return responses

    if tracker.should_announce():
        tracker.mark_announced()
        resp = _send(client, SubmissionKind.PLAYING_NOW, track, limits=limits, clock=clock)
        if resp is not None:
            responses.append(resp)

    if tracker.should_submit():
        # Marked before sending: a failed single is reported, not retried
        tracker.mark_submitted()
        resp = _send(client, SubmissionKind.SINGLE, track, limits=limits, clock=clock)
        if resp is not None:
            responses.append(resp)

    return responses


def main():
    settings = config.from_env()
    setup_logging(settings.log_level)

    client = None if settings.dry_run else ListenBrainzClient(settings.api_root, settings.timeout)
    log.info("ListenBrainz endpoint: %s | dry_run=%s | max listen size=%s",
             settings.api_root, settings.dry_run, settings.limits.max_listen_size)

    try:
        body = encode_bytes(SubmissionKind.PLAYING_NOW, DEMO_TRACK, limits=settings.limits)
    except EncodingError as e:
        log.error("Cannot encode demo listen: %s", e)
        raise SystemExit(1)
    print(body.decode("utf-8"))

    if client is not None:
        try:
            print(client.deliver(body))
        except TransportError as e:
            log.error("Submission failed: %s", e)
            raise SystemExit(1)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        log.info("Shutting down…")
