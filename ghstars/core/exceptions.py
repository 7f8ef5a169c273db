from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Raised when request validation fails."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
        )


class NotARepositoryLink(HTTPException):
    """Raised when a URL does not point at a GitHub repository."""

    def __init__(self, url: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Not a GitHub repository link: {url}",
        )
