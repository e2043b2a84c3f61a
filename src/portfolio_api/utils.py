from __future__ import annotations

from typing import Any, List, Sequence

from fastapi import Response
from fastapi.routing import APIRoute
from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

CORS_ALLOW_HEADERS = "Content-Type, Authorization"

_VERB_ORDER = ("GET", "POST", "PUT", "DELETE")


# PUBLIC_INTERFACE
def cors_preflight(methods: Sequence[str]) -> Response:
    """
    Build the 200 response for an OPTIONS request on a resource route.

    Args:
        methods: The verbs the route supports; OPTIONS is always added.

    Returns:
        Empty response with permissive CORS headers for those verbs.
    """
    verbs = [m.upper() for m in methods]
    if "OPTIONS" not in verbs:
        verbs.append("OPTIONS")
    return Response(
        status_code=200,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": ", ".join(verbs),
            "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
        },
    )


def route_methods(routes: Sequence[Any], path: str) -> List[str]:
    """
    Verbs of the documented routes matching `path`, plus OPTIONS; [] when none match.

    Undocumented routes (OPTIONS handlers, the missing-id guards) are skipped.
    """
    verbs = set()
    for route in routes:
        if isinstance(route, APIRoute) and route.include_in_schema and route.path_regex.match(path):
            verbs |= route.methods
    ordered = [v for v in _VERB_ORDER if v in verbs]
    return ordered + ["OPTIONS"] if ordered else []


class RouteCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware whose preflight answers list only the matched route's verbs.

    `routes` is the application's live route list, so routers included after
    the middleware is added are still seen.
    """

    def __init__(self, app: ASGIApp, routes: Sequence[Any], **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self._routes = routes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "OPTIONS":
            headers = Headers(scope=scope)
            methods = route_methods(self._routes, scope["path"])
            if "origin" in headers and "access-control-request-method" in headers and methods:
                response = self.preflight_response(request_headers=headers)
                response.headers["Access-Control-Allow-Methods"] = ", ".join(methods)
                await response(scope, receive, send)
                return
        await super().__call__(scope, receive, send)
