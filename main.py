"""Main entry point for the envelope API sandbox.

This module creates and configures the FastAPI app that emulates the legacy
mobile backend, for integration tests and local development.

To run the development server:
    uvicorn main:app --reload

The shared passphrase is read from ``ENVELOPE_ENCRYPTION_KEY`` (a ``.env``
file is loaded first).
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from sandbox.dependencies import initialize_sandbox, shutdown_sandbox
from sandbox.exceptions import (
    EnvelopeStatusException,
    envelope_status_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from sandbox.routes import auth as auth_routes
from sandbox.routes import files as files_routes
from sandbox.routes import sample as sample_routes
from sandbox.routes import user as user_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create sandbox state at startup and drop it at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    load_dotenv()
    initialize_sandbox()
    logger.info("Sandbox initialized")

    yield

    shutdown_sandbox()
    logger.info("Sandbox shut down")


app = FastAPI(
    title="Envelope API Sandbox",
    description="Emulates the mobile backend's envelope and encrypted-request protocol",
    version="0.1.0",
    lifespan=lifespan,
)

# Every failure is reported as HTTP 200 with an envelope status
app.add_exception_handler(EnvelopeStatusException, envelope_status_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(auth_routes.router)
app.include_router(user_routes.router)
app.include_router(sample_routes.router)
app.include_router(files_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message."""
    return {
        "message": "Welcome to the Envelope API Sandbox",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
