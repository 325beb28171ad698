# errors.py
# Error taxonomy for the API. Every error is rendered as {"message": ...}.


class ApiError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {"message": self.message}


class BadRequest(ApiError):
    status_code = 400
    message = "Bad request"


class Unauthenticated(ApiError):
    status_code = 401
    message = "unauthorized access"


class Forbidden(ApiError):
    status_code = 403
    message = "forbidden access"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"


class AlreadyJoined(ApiError):
    status_code = 400
    message = "Already joined"


class EventFull(ApiError):
    status_code = 400
    message = "Event is full"
