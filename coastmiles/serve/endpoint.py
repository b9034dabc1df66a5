"""Read-only responder for the cached feature collection."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Callable, Iterable

from coastmiles.common.constants import CACHE_KEY
from coastmiles.store.kv import CacheStore

NOT_FOUND_BODY = "Not found. Cron job did not create dataset?"
FORBIDDEN_BODY = "Forbidden"

SUCCESS_HEADERS = {
    "content-type": "application/json",
    "cache-control": "public, max-age=86400",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,HEAD,POST,OPTIONS",
    "Access-Control-Max-Age": "86400",
}


@dataclass(frozen=True)
class Response:
    status: int
    body: str
    headers: dict[str, str] = field(default_factory=dict)


def respond(method: str, store: CacheStore, key: str = CACHE_KEY) -> Response:
    if method.upper() != "GET":
        return Response(status=HTTPStatus.FORBIDDEN, body=FORBIDDEN_BODY)
    payload = store.get(key)
    if payload is None:
        return Response(status=HTTPStatus.NOT_FOUND, body=NOT_FOUND_BODY)
    return Response(status=HTTPStatus.OK, body=payload, headers=dict(SUCCESS_HEADERS))


def make_wsgi_app(store: CacheStore, key: str = CACHE_KEY) -> Callable[[dict, Callable], Iterable[bytes]]:
    def app(environ: dict, start_response: Callable) -> Iterable[bytes]:
        response = respond(environ.get("REQUEST_METHOD", "GET"), store, key)
        body = response.body.encode("utf-8")
        status = HTTPStatus(response.status)
        headers = list(response.headers.items())
        if not response.headers:
            headers.append(("content-type", "text/plain; charset=utf-8"))
        headers.append(("content-length", str(len(body))))
        start_response(f"{status.value} {status.phrase}", headers)
        return [body]

    return app
