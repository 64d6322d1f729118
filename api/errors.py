from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from eventlog.core.exceptions import ValidationError


class ApiError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status: int = 400,
        *,
        headers: dict[str, str] | None = None,
        **extra: object,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.headers = headers
        self.extra = extra

    @classmethod
    def invalid(cls, exc: ValidationError) -> ApiError:
        if exc.index is None:
            return cls(code="event.invalid", message=exc.message)
        return cls(code="event.invalid", message=exc.message, index=exc.index)

    @classmethod
    def write_failed(cls) -> ApiError:
        return cls(code="storage.write_failed", message="Internal server error", status=500)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    body = {"error": exc.message, "code": exc.code, **exc.extra}
    return JSONResponse(
        status_code=exc.status,
        content=body,
        headers={"Cache-Control": "no-store", **(exc.headers or {})},
    )
