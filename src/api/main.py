import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.dependencies import close_backend, get_project_settings
from src.api.journey import setup_journey_cookie
from src.api.observability import setup_observability
from src.api.routers.project_benefit_area import router as project_benefit_area_router
from src.api.routers.project_overview import router as project_overview_router
from src.api.routers.project_steps import router as project_steps_router


@asynccontextmanager
async def _app_lifespan(_app: FastAPI):
    yield
    close_backend()


app = FastAPI(
    title="Project Proposal Workflow API",
    version="0.1.0",
    description=(
        "Multi-step authoring of project proposals.\n\n"
        "Steps accumulate answers in a per-journey draft and submit partial saves to the "
        "project backend at fixed save levels. GET endpoints return view models; successful "
        "POSTs answer `303 See Other` with the next page."
    ),
    openapi_tags=[
        {
            "name": "Project Proposal Steps",
            "description": "Create and edit journey steps, one GET/POST pair per step.",
        },
        {
            "name": "Project Proposal Overview",
            "description": "Enriched project summary page.",
        },
        {
            "name": "Project Benefit Area",
            "description": "Benefit-area file upload, status polling, and deletion.",
        },
        {
            "name": "Health",
            "description": "Liveness and readiness probes.",
        },
    ],
    lifespan=_app_lifespan,
)

setup_observability(app)
setup_journey_cookie(app, secure=get_project_settings().journey_cookie_secure)

logger = logging.getLogger(__name__)

app.include_router(project_steps_router)
app.include_router(project_overview_router)
app.include_router(project_benefit_area_router)


@app.get("/health", tags=["Health"])
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health/live", tags=["Health"])
def health_live() -> dict[str, str]:
    return {"status": "live"}


@app.get("/health/ready", tags=["Health"])
def health_ready() -> dict[str, str]:
    return {"status": "ready"}


@app.exception_handler(Exception)
async def unhandled_exception_to_problem_details(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception while serving request", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/problem+json",
        content={
            "type": "about:blank",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred.",
            "instance": str(request.url.path),
        },
    )
