"""Route registration with middleware chains on top of a Flask application."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any

from jobboard.middleware import Middleware

_PARAM = re.compile(r":(\w+)")
_WILDCARD = re.compile(r"\*(\w+)")
_DEFAULT_PORT = 8080


def _flask_rule(uri: str) -> str:
    """Convert ``/job/:id`` and ``/files/*path`` to Flask's rule syntax."""
    rule = _PARAM.sub(r"<\1>", uri)
    return _WILDCARD.sub(r"<path:\1>", rule)


def _run_chain(chain: Sequence[Middleware], endpoint: Callable[[], Any]) -> Any:
    def step(index: int) -> Any:
        if index == len(chain):
            return endpoint()
        return chain[index](lambda: step(index + 1))

    return step(0)


def _listen_address(port: str) -> tuple[str, int]:
    host, sep, number = (port or f":{_DEFAULT_PORT}").rpartition(":")
    if not sep:
        host, number = "", port
    try:
        return host or "0.0.0.0", int(number)
    except ValueError:
        raise SystemExit(f"listen tcp {port}: invalid port") from None


class Router:
    """Registers handlers on a Flask app, each behind its middlewares.

    Global middlewares added with :meth:`use` run before a route's own
    middlewares, for routes registered after them. They also run for
    requests that match no route, which are answered with 404.
    """

    def __init__(self, app: Any) -> None:
        self._app = app
        self._middlewares: list[Middleware] = []
        self._fallback_installed = False

    def _add(
        self, method: str, uri: str, handler: Callable[..., Any], middlewares: Sequence[Middleware]
    ) -> None:
        chain = (*self._middlewares, *middlewares)

        def view(**params: Any) -> Any:
            return _run_chain(chain, lambda: handler(**params))

        self._app.add_url_rule(
            _flask_rule(uri),
            endpoint=f"{method} {uri}",
            view_func=view,
            methods=[method],
            provide_automatic_options=False,
        )

    def get(self, uri: str, handler: Callable[..., Any], *args: Middleware) -> None:
        self._add("GET", uri, handler, args)

    def post(self, uri: str, handler: Callable[..., Any], *args: Middleware) -> None:
        self._add("POST", uri, handler, args)

    def put(self, uri: str, handler: Callable[..., Any], *args: Middleware) -> None:
        self._add("PUT", uri, handler, args)

    def delete(self, uri: str, handler: Callable[..., Any], *args: Middleware) -> None:
        self._add("DELETE", uri, handler, args)

    def use(self, *args: Middleware) -> None:
        """Add global middlewares."""
        self._middlewares.extend(args)
        if not self._fallback_installed:
            self._app.register_error_handler(404, self._not_found)
            self._app.register_error_handler(405, self._not_found)
            self._fallback_installed = True

    def _not_found(self, error: Exception) -> Any:
        not_found = self._app.aborter.mapping[404]
        return _run_chain(tuple(self._middlewares), lambda: not_found().get_response())

    def serve(self, port: str) -> None:
        """Serve the app on ``port``, given as ``:8080`` or ``host:8080``."""
        print(f"Server running in port {port} ", end="", flush=True)
        host, number = _listen_address(port)
        try:
            self._app.run(host=host, port=number)
        except OSError as exc:
            raise SystemExit(str(exc)) from exc