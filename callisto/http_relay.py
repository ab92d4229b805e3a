"""
http_relay.py

stateless pass-through that sends one outbound request for the ui and reports
status, headers, body, timing and size.
"""

from __future__ import annotations

import time

import httpx

from .errors import RelayError
from .models import HttpRequest, HttpResponse
from .settings import HTTP_TIMEOUT_S

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


def send_http_request(request: HttpRequest, client: httpx.Client | None = None) -> HttpResponse:
    method = request.method.upper()
    if method not in SUPPORTED_METHODS:
        raise RelayError(f"Unsupported HTTP method: {request.method}")

    content = request.body if request.body else None

    start = time.perf_counter()
    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=httpx.Timeout(HTTP_TIMEOUT_S))
    try:
        r = client.request(method, request.url, headers=request.headers, content=content, follow_redirects=True)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise RelayError(f"Failed to send request: {e}") from e
    finally:
        if owns_client:
            client.close()

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    raw = r.content

    return HttpResponse(
        status=r.status_code,
        status_text=httpx.codes.get_reason_phrase(r.status_code) or "Unknown",
        headers={k: v for k, v in r.headers.multi_items()},
        body=raw.decode("utf-8", errors="replace"),
        time=elapsed_ms,
        size=len(raw),
    )
