import structlog
from fastapi import FastAPI

from visservice.api.interpret import router as interpret_router
from visservice.api.metrics import router as metrics_router
from visservice.collaborators.compiler import get_compiler
from visservice.collaborators.loader import CollaboratorNotConfigured
from visservice.collaborators.match import get_match_engine
from visservice.config import get_settings
from visservice.observability.logging import configure_logging
from visservice.observability.middleware import RequestContextMiddleware


app = FastAPI(title="Visualization Service", version="0.1.0")
app.add_middleware(RequestContextMiddleware)
app.include_router(interpret_router)
app.include_router(metrics_router)


@app.on_event("startup")
def _startup() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    logger = structlog.get_logger("startup")
    for name, loader in (("compiler", get_compiler), ("match_engine", get_match_engine)):
        try:
            loader()
        except CollaboratorNotConfigured as exc:
            logger.warning("collaborator_not_configured", collaborator=name, error=str(exc))


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
