from fastapi import HTTPException, status


class PersistenceError(Exception):
    """The store rejected or failed a request (connectivity, constraint violation)."""

    def __init__(self, operation: str, message: str = "Persistence failure"):
        super().__init__(f"{message} during {operation}")
        self.operation = operation


class NotFoundException(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class WorkoutNotFoundException(NotFoundException):
    # No id or owner hint: a foreign workout reads the same as a missing one
    def __init__(self):
        super().__init__(detail="Workout not found")


class UnauthorizedException(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
