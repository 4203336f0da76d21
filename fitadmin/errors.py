from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class FitAdminError(Exception):
    """Base class for errors raised by the plan services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(FitAdminError):
    status_code = 404

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(FitAdminError):
    status_code = 400


class BackendError(FitAdminError):
    status_code = 500


class PartialFailure(BackendError):
    """A multi-step write stopped part way through.

    ``completed`` holds the row counts written before the failure. The
    transaction has been rolled back, so none of them are persisted.
    """

    def __init__(self, operation: str, completed: dict[str, int]):
        done = ", ".join(f"{count} {kind}" for kind, count in completed.items())
        super().__init__(f"{operation} failed after writing {done}; all changes rolled back")
        self.operation = operation
        self.completed = completed


async def _fitadmin_error_handler(request: Request, exc: FitAdminError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FitAdminError, _fitadmin_error_handler)
