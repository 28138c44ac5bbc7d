from fastapi import HTTPException, status


class PolicyDeskException(HTTPException):
    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(PolicyDeskException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class NotAuthenticatedError(PolicyDeskException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail=detail, status_code=status.HTTP_401_UNAUTHORIZED)


class PermissionDeniedError(PolicyDeskException):
    def __init__(self, detail: str = "You do not have permission to perform this action"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


class NotFoundError(PolicyDeskException):
    def __init__(self, resource: str, resource_id: str | int | None = None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail = f"{resource} '{resource_id}' not found"
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class ConflictError(PolicyDeskException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_409_CONFLICT)


class TooManyRequestsError(PolicyDeskException):
    def __init__(self, detail: str = "Too many requests, please try again later"):
        super().__init__(detail=detail, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
