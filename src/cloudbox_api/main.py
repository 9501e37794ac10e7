from textwrap import dedent
import logging
import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware

from cloudbox_api.config.settings import Settings
from cloudbox_api.dependencies import build_reconciliation_service
from cloudbox_api.errors import (
    CloudBoxError,
    handle_broad_exceptions,
    handle_cloudbox_errors,
    handle_pydantic_validation_errors,
)
from cloudbox_api.routers.billing import router as billing_router
from cloudbox_api.routers.files import router as files_router
from cloudbox_api.routers.health import router as health_router

# Set up logging
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(
        title="CloudBox API",
        summary="Store, organize and share files",
        version="v1",
        description=dedent(
            """\
        Files live in an S3 bucket; their metadata (size, type, favorite and
        trash flags) lives in a document store. Every mutating endpoint keeps
        the two in step.

        | Helpful Links | Notes |
        | --- | --- |
        | [FastAPI Documentation](https://fastapi.tiangolo.com/) | |
        | [Presigned URLs](https://docs.aws.amazon.com/AmazonS3/latest/userguide/ShareObjectPreSignedURL.html) | downloads are handed out as time-limited links |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings

    logger.info(f"creating metadata store ({settings.metadata_backend})")
    reconciliation = build_reconciliation_service(settings)
    reconciliation.file_service.init()
    app.state.reconciliation = reconciliation

    app.include_router(files_router, prefix="/api", tags=["files"])
    app.include_router(billing_router, prefix="/api", tags=["billing"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=CloudBoxError,
        handler=handle_cloudbox_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.api_port)
