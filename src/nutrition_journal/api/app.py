"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutrition_journal.api.grocery import router as grocery_router
from nutrition_journal.api.journal import router as journal_router
from nutrition_journal.api.pantry import router as pantry_router
from nutrition_journal.api.recipes import router as recipes_router
from nutrition_journal.api.wizard import router as wizard_router
from nutrition_journal.app_logging import configure_logging
from nutrition_journal.containers import AppContainer
from nutrition_journal.services.grocery import InvalidGroceryError
from nutrition_journal.services.recipes import InvalidRecipeError
from nutrition_journal.services.wizard import (
    SubmissionFailedError,
    SubmissionInProgressError,
    UnknownWizardError,
    WizardNotReadyError,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Nutrition Journal", lifespan=lifespan)
    app.state.container = container

    app.include_router(pantry_router)
    app.include_router(recipes_router)
    app.include_router(journal_router)
    app.include_router(wizard_router)
    app.include_router(grocery_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.exception_handler(InvalidGroceryError)
    @app.exception_handler(InvalidRecipeError)
    async def invalid_record(
        _request: Request, exc: InvalidRecipeError | InvalidGroceryError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc), "errors": exc.errors},
        )

    @app.exception_handler(UnknownWizardError)
    async def unknown_wizard(_request: Request, exc: UnknownWizardError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Unknown wizard {exc}"},
        )

    @app.exception_handler(WizardNotReadyError)
    @app.exception_handler(SubmissionInProgressError)
    async def wizard_conflict(_request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(SubmissionFailedError)
    async def submission_failed(
        request: Request, exc: SubmissionFailedError
    ) -> JSONResponse:
        logger.warning(
            "Wizard submission failed", extra={"path": request.url.path}
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "Failed to log meal. Please try again."},
        )

    return app
