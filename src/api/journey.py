import re
from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response

from src.api.observability import journey_id_var

JOURNEY_COOKIE_NAME = "project_journey"
_JOURNEY_ID_PATTERN = re.compile(r"^jrn_[0-9a-f]{32}$")


def new_journey_id() -> str:
    return f"jrn_{uuid4().hex}"


def setup_journey_cookie(app: FastAPI, *, secure: bool) -> None:
    @app.middleware("http")
    async def _journey_cookie_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        journey_id = request.cookies.get(JOURNEY_COOKIE_NAME, "")
        issued = not _JOURNEY_ID_PATTERN.fullmatch(journey_id)
        if issued:
            journey_id = new_journey_id()
        request.state.journey_id = journey_id
        journey_token = journey_id_var.set(journey_id)
        try:
            response = await call_next(request)
        finally:
            journey_id_var.reset(journey_token)
        if issued:
            response.set_cookie(
                JOURNEY_COOKIE_NAME,
                journey_id,
                httponly=True,
                samesite="lax",
                secure=secure,
            )
        return response
