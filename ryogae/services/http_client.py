"""Single-attempt HTTP GET returning decoded JSON.

Uses stdlib urllib; callers decide whether and when to try again, so there is
no retry loop here. Failures are split by cause so the rate client can map
them onto its error taxonomy.
"""
from __future__ import annotations

import http.client
import json
import socket
import urllib.error
import urllib.request
from typing import Any


class HttpError(Exception):
    pass


class TransportError(HttpError):
    """DNS, TLS, connection or timeout failure; no HTTP status was received."""


class StatusError(HttpError):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class JsonDecodeError(HttpError):
    pass


def get_json(url: str, *, timeout: float = 5.0) -> Any:
    try:
        request = urllib.request.Request(
            url, method="GET", headers={"Accept": "application/json"}
        )
        with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise StatusError(status, f"HTTP {status}")
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise StatusError(e.code, f"HTTP {e.code}") from e
    except urllib.error.URLError as e:
        raise TransportError(f"request failed: {e.reason}") from e
    except (TimeoutError, socket.timeout) as e:
        raise TransportError(f"request timed out after {timeout}s") from e
    except (ConnectionError, OSError) as e:
        raise TransportError(f"connection error: {e}") from e
    # BadStatusLine, IncompleteRead, InvalidURL: not OSError, so urlopen lets them through
    except http.client.HTTPException as e:
        raise TransportError(f"malformed response: {e!r}") from e
    except ValueError as e:
        raise TransportError(f"request could not be sent: {e}") from e
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise JsonDecodeError(f"invalid JSON body: {e}") from e
