import logging

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from .config import AUTH_HEADER, CORS_ORIGINS, HOST, LOG_LEVEL, PORT, RELOAD
from .database import create_tables
from .logging_setup import setup_logging
from .routers import auth, tasks

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Body validation failures are plain client errors (400, not 422).

    The body is parsed before the path dependencies run, so a task id that
    could never match still has to win here and answer 404.
    """
    task_id = request.path_params.get("task_id")
    if task_id is not None and not tasks.is_task_id(task_id):
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def not_found_aware_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Missing or foreign records answer 404 with an empty body."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return await http_exception_handler(request, exc)


def create_application() -> FastAPI:
    app = FastAPI(
        title="Todo API",
        description="Multi-user task list API",
        version="1.0.0",
    )

    # Configure CORS; clients have to be able to read the token header.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[AUTH_HEADER],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_aware_http_exception_handler)

    # Include routers
    app.include_router(auth.router, tags=["users"])
    app.include_router(tasks.router, tags=["tasks"])

    # Create tables on startup
    @app.on_event("startup")
    def on_startup():
        create_tables()

    @app.get("/")
    def read_root():
        return {"message": "Todo API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


app = create_application()


def run() -> None:
    """Serve the API with uvicorn."""
    setup_logging(LOG_LEVEL)
    logger.info("Starting up at %s:%s", HOST, PORT)
    uvicorn.run(
        "todo_api.main:app",
        host=HOST,
        port=PORT,
        reload=RELOAD,
    )
