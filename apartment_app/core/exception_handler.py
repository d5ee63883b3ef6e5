from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import ValidationFailed


class ValidationErrorHandler:
    """Renders request validation failures as a list of field messages.

    Also registered for ``ValidationFailed`` so service-level field errors
    reach the client in the same shape.
    """

    async def __call__(self, request: Request, exc: RequestValidationError | ValidationFailed):
        if isinstance(exc, ValidationFailed):
            details = list(exc.detail)
        else:
            details = []
            for err in exc.errors():
                loc = [str(part) for part in err.get("loc", ()) if part != "body"]
                details.append(
                    {
                        "field": ".".join(loc),
                        "msg": str(err.get("msg")),
                        "type": err.get("type"),
                    }
                )

        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "Validation failed",
                "details": details,
            },
        )
