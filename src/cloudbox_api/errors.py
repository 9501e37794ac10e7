"""Error taxonomy for the CloudBox API and the handlers that turn it into HTTP responses."""

import logging

import pydantic
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CloudBoxError(Exception):
    """Base class for errors the API knows how to report.

    `detail` is what clients see. Unless `expose_message` is set, it is the
    class-level `public_message`, so store error text never leaves the server.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"
    expose_message = False

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)

    @property
    def detail(self) -> str:
        return str(self) if self.expose_message else self.public_message


class ValidationError(CloudBoxError):
    """A required field is missing or a request is malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid request"
    expose_message = True


class NotFoundError(CloudBoxError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "File not found"
    expose_message = True


class StoreWriteError(CloudBoxError):
    public_message = "Storage write failed"


class StoreReadError(CloudBoxError):
    public_message = "Storage read failed"


class BlobNotFoundError(StoreReadError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "File not found"


class DownloadUrlExpired(StoreReadError):
    status_code = status.HTTP_410_GONE
    public_message = "Download link expired"


class UploadFailed(CloudBoxError):
    public_message = "Upload failed"


class BillingError(CloudBoxError):
    public_message = "Could not create checkout session"


async def handle_cloudbox_errors(request: Request, exc: CloudBoxError) -> JSONResponse:
    """Map a known error to its status code and a human-readable message."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {
                    "loc": list(error.get("loc", ())),
                    "msg": error["msg"],
                }
                for error in errors
            ]
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that propagates during the request/response cycle."""
    try:
        return await call_next(request)
    except Exception as err:
        logger.exception(err)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
