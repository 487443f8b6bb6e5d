"""Config Keeper Web Backend - FastAPI Application."""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.web.core.lifespan import lifespan
from backend.web.routers import aliases, content_formats, contents, files, folders, health, listeners
from backend.web.utils.helpers import error_body
from config import load_settings


def create_app() -> FastAPI:
    app = FastAPI(title="Config Keeper", lifespan=lifespan)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(error_body(exc), status_code=exc.status_code, headers=exc.headers)

    # Include routers
    app.include_router(folders.router)
    app.include_router(files.router)
    app.include_router(contents.router)
    app.include_router(listeners.router)
    app.include_router(aliases.router)
    app.include_router(content_formats.router)
    app.include_router(health.router)
    return app


app = create_app()


def main() -> None:
    settings = load_settings()
    # @@@module-launch-target - Package-qualified target keeps module launch (`python -m backend.web.main`) import-safe.
    uvicorn.run("backend.web.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
