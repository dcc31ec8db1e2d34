import logging

import requests

from lbsubmit.config import API_ROOT_URL

log = logging.getLogger("listenbrainz")


class TransportError(Exception):
    """Delivery failed: connection problem, timeout or non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ListenBrainzClient:
    """Thin wrapper over requests that POSTs an already-encoded payload."""

    def __init__(self, api_root: str = API_ROOT_URL, timeout: int = 10):
        self.url = api_root
        self.timeout = timeout

    def deliver(self, payload: bytes) -> str:
        """POST the payload as-is and return the response body. No retries."""
        try:
            resp = requests.post(
                self.url,
                data=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("deliver failed: %s", e)
            raise TransportError(str(e)) from e

        if not resp.ok:
            log.warning("deliver rejected: status=%s body=%s", resp.status_code, resp.text)
            raise TransportError(f"ListenBrainz returned {resp.status_code}: {resp.text}",
                                 status_code=resp.status_code)

        log.debug("deliver ok: status=%s bytes=%s", resp.status_code, len(payload))
        return resp.text
