"""Map domain errors onto HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.observability import get_logger
from app.domain.shared.exceptions import DomainError, ErrorType

logger = get_logger(__name__)

STATUS_BY_ERROR_TYPE = {
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorType.CONCURRENCY: status.HTTP_409_CONFLICT,
    ErrorType.PASS_ABORTED: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_ERROR_TYPE.get(
        exc.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    log = logger.warning if status_code < 500 else logger.error
    log(
        "Domain error",
        path=request.url.path,
        status_code=status_code,
        error_type=exc.error_type.value,
        error=exc.message,
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
