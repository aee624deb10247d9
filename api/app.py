"""
api/app.py

REST API for binary cancer screening of a single uploaded image.

- GET /          liveness text, independent of model state
- POST /predict  multipart field ``image`` (PNG/JPG, <= 1 MB) -> label + suggestion

The model is fetched once in the lifespan startup, before uvicorn starts
accepting connections. If it cannot be loaded the startup fails and the
process exits. The resulting handle lives on ``app.state`` and reaches the
route through a dependency.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from api.schemas import FailResponse, PredictionData, PredictResponse
from api.uploads import MissingFileError, UploadError, read_upload, validate_upload
from config.settings import Settings, get_settings
from model.errors import ModelLoadError
from model.inference import ModelHandle, predict_image
from model.loader import load_model

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

PREDICTION_FAILED_MESSAGE = "Terjadi kesalahan dalam melakukan prediksi"


def _fail(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body = FailResponse(message=message, error=error)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def get_model_handle(request: Request) -> Optional[ModelHandle]:
    return request.app.state.model_handle


def create_app(
    settings: Optional[Settings] = None,
    handle: Optional[ModelHandle] = None,
) -> FastAPI:
    """
    Build the application. Passing ``handle`` skips the remote model fetch,
    which is how tests inject a stand-in classifier.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.model_handle is None:
            try:
                app.state.model_handle = await asyncio.to_thread(
                    load_model, settings.model_url, settings.model_cache_dir
                )
            except ModelLoadError:
                logger.critical("Model could not be loaded; refusing to start.")
                raise
        logger.info("Model ready (%s)", app.state.model_handle.source_url)
        yield
        logger.info("Shutting down.")

    app = FastAPI(
        title="Cancer Screening API",
        description="Binary cancer / non-cancer classification of a single uploaded image.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.model_handle = handle
    inference_slots = asyncio.Semaphore(settings.max_concurrent_inferences)

    # ----------------------------
    # Error envelopes
    # ----------------------------

    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError) -> JSONResponse:
        logger.warning("Upload rejected: %s", exc)
        return _fail(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        # a plain text "image" field carries no file
        if any(tuple(err.get("loc", ()))[-1:] == ("image",) for err in errors):
            logger.warning("Upload rejected: image field is not a file")
            return _fail(400, MissingFileError.default_message)
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        logger.warning("Request rejected: %s", message)
        return _fail(400, message)

    # ----------------------------
    # Routes
    # ----------------------------

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return "Model is online"

    @app.post("/predict")
    async def predict(
        image: Optional[UploadFile] = File(None),
        handle: Optional[ModelHandle] = Depends(get_model_handle),
    ):
        if image is None:
            raise MissingFileError()

        validate_upload(image.filename, image.content_type, settings.allowed_extensions)
        content = await read_upload(image, settings.max_upload_bytes)

        if handle is None:
            return _fail(503, "Model is not loaded")

        try:
            async with inference_slots:
                pred = await asyncio.to_thread(
                    predict_image,
                    content,
                    handle,
                    settings.image_size,
                    settings.threshold,
                )
        except Exception as e:
            logger.error("Prediction error: %s", e, exc_info=True)
            return _fail(500, PREDICTION_FAILED_MESSAGE, error=str(e))

        data = PredictionData(result=pred.label, suggestion=pred.suggestion)
        logger.info("Prediction %s: %s (p=%.4f)", data.id, pred.label, pred.probability)
        return PredictResponse(data=data).model_dump()

    return app


app = create_app()


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Run the cancer screening API server.")
    parser.add_argument("--host", default=settings.host, help="Host to bind to.")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on.")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development).")
    args = parser.parse_args()

    logger.info("Server is running on port %d http://localhost:%d", args.port, args.port)
    uvicorn.run(
        "api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
