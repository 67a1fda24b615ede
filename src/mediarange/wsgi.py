"""Reference host transport: a WSGI application built on werkzeug."""

from __future__ import annotations

import logging

from werkzeug.wrappers import Request, Response

from .core.model import MediaRangeError
from .core.responder import RangeResponder

logger = logging.getLogger(__name__)


class RangeApp:
    """Route ``GET``/``HEAD /<identifier>`` through a RangeResponder.

    The byte source is handed to werkzeug unbuffered; werkzeug's closing
    iterator calls its ``close()`` when the server finishes or abandons the
    response, which releases the underlying handle.
    """

    def __init__(self, responder: RangeResponder):
        self.responder = responder

    def dispatch(self, request: Request) -> Response:
        if request.method not in ("GET", "HEAD"):
            return Response("Method Not Allowed", status=405, headers={"Allow": "GET, HEAD"},
                            mimetype="text/plain")

        identifier = request.path.lstrip("/")
        try:
            descriptor = self.responder.respond(identifier, request.headers.get("Range"))
        except MediaRangeError as e:
            return Response(str(e), status=e.status_code, headers=e.headers, mimetype="text/plain")

        return Response(
            descriptor.body,
            status=descriptor.status,
            headers=list(descriptor.headers.items()),
            direct_passthrough=True,
        )

    def __call__(self, environ, start_response):
        request = Request(environ)
        response = self.dispatch(request)
        return response(environ, start_response)


def make_app(resolver, config=None) -> RangeApp:
    """Build a RangeApp around a fresh RangeResponder."""
    return RangeApp(RangeResponder(resolver, config))


def serve(app: RangeApp, host: str = "127.0.0.1", port: int = 8000):
    """Run `app` on werkzeug's threaded development server."""
    from werkzeug.serving import run_simple

    logger.info("Serving on http://%s:%d", host, port)
    run_simple(host, port, app, threaded=True)
