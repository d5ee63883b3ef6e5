from fastapi import HTTPException, status

NOT_FOUND_OR_FORBIDDEN_MSG = (
    "Apartment not found or you do not have permission to manage this apartment"
)


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Access Denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundOrForbidden(Forbidden):
    """Raised for both a missing apartment and one the caller does not manage."""

    def __init__(self):
        super().__init__(detail=NOT_FOUND_OR_FORBIDDEN_MSG)


class InvalidReference(HTTPException):
    def __init__(self, detail: str = "Invalid reference"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationFailed(HTTPException):
    """Field errors as ``{"field", "msg", "type"}`` dicts, the request-validation shape."""

    def __init__(self, errors: list[dict]):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=list(errors)
        )


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "Already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class Internal(HTTPException):
    def __init__(self, detail: str = "Something went wrong on our end. Please try again."):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )
