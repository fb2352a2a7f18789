"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Header, Request, UploadFile, status
from fastapi.responses import JSONResponse, Response

from tray_nutrition.api.serializers import serialize_outcome
from tray_nutrition.api.staff import router as staff_router
from tray_nutrition.app_logging import configure_logging
from tray_nutrition.containers import AppContainer
from tray_nutrition.domain.errors import DataSourceError, DetectorError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not await app.state.container.detector_client.health():
            logger.warning(
                "Detector at %s is not reachable",
                app.state.container.settings.detector_api_url,
            )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(staff_router)

    @app.exception_handler(DetectorError)
    async def detector_error(request: Request, exc: DetectorError) -> JSONResponse:
        logger.error("Detection service failure: %s", exc)
        return _error_response(
            request.app.state.container, exc, "Detection service unavailable."
        )

    @app.exception_handler(DataSourceError)
    async def data_source_error(
        request: Request, exc: DataSourceError
    ) -> JSONResponse:
        logger.error("Data source failure: %s", exc)
        return _error_response(
            request.app.state.container, exc, "Nutrition data is unavailable."
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/detect", response_model=None)
    async def detect(
        request: Request,
        image: UploadFile | None = File(default=None),
        preview: bool = False,
        x_user_id: int | None = Header(default=None),
    ) -> Response | dict[str, object]:
        """Analyse a tray photo, store the result and return the breakdown."""
        state_container: AppContainer = request.app.state.container
        if image is None:
            return _missing_image()
        content = await image.read()
        if not content:
            return _missing_image()
        filename = image.filename or "image.jpg"

        if preview:
            annotated = await state_container.detection_service.preview(
                content, filename
            )
            return Response(content=annotated, media_type="image/jpeg")

        outcome = await state_container.detection_service.detect(
            content, filename=filename, user_id=x_user_id
        )
        return serialize_outcome(outcome)

    @app.post("/api/detect/preview", response_model=None)
    async def detect_preview(
        request: Request, image: UploadFile | None = File(default=None)
    ) -> Response:
        """Return the detector's annotated image."""
        state_container: AppContainer = request.app.state.container
        if image is None:
            return _missing_image()
        content = await image.read()
        if not content:
            return _missing_image()
        annotated = await state_container.detection_service.preview(
            content, image.filename or "image.jpg"
        )
        return Response(content=annotated, media_type="image/jpeg")

    return app


def _missing_image() -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": "No image provided"},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def _error_response(
    state_container: AppContainer, exc: Exception, fallback: str
) -> JSONResponse:
    """Return a 502 payload, with debug detail in local environments."""
    message = fallback
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            message = f"{fallback} (debug: {detail})"
    return JSONResponse(
        {"success": False, "error": message},
        status_code=status.HTTP_502_BAD_GATEWAY,
    )
