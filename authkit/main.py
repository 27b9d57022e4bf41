"""FastAPI app serving the OAuth callback route.

A pending Google sign-in lives in the memory of the process that called
``sign_in_with_google``, so the callback must be served by that same
process. Build the app with ``create_app()`` inside the process that signs
users in, or mount ``authkit.auth.router.router`` and call
``register_exception_handlers`` on the host's own app. A separate callback
process never matches a pending sign-in and answers 400.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from authkit import configure
from authkit.auth.router import router as auth_router
from authkit.core.configuration import configuration_manager
from authkit.core.exception_handlers import register_exception_handlers
from authkit.core.http import close_http_clients
from authkit.core.logging import configure_logging
from authkit.core.settings import get_settings


@asynccontextmanager
async def lifespan(_: FastAPI):
    if not configuration_manager.is_configured:
        configure(get_settings().to_configuration())
    yield
    await close_http_clients()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="authkit", version="0.1.0", lifespan=lifespan)
    app.include_router(auth_router)
    register_exception_handlers(app)
    return app
