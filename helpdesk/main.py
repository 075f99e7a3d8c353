# helpdesk/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from helpdesk.core.config import get_settings
from helpdesk.core.database import Base, engine
from helpdesk.core.errors import ConflictError, DomainError, NotFoundError, ValidationError
from helpdesk.core.logging_config import configure_logging
from helpdesk.location.routes import router as location_router
from helpdesk.ticket.routes import router as ticket_router

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESC,
    version=settings.APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(location_router)
app.include_router(ticket_router)


ERROR_STATUS = {
    NotFoundError: 404,
    ValidationError: 422,
    ConflictError: 409,
}


@app.exception_handler(DomainError)
def domain_error_handler(request: Request, exc: DomainError):
    status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}
