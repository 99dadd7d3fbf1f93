class ClubError(Exception):
    """Base for failures that map onto an HTTP status at the request boundary."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(ClubError):
    status_code = 400
    default_message = "Invalid request"


class Forbidden(ClubError):
    status_code = 403
    default_message = "Forbidden"


class GatewaySessionError(ClubError):
    default_message = "Could not create checkout session"


class GatewayLookupError(ClubError):
    default_message = "Could not retrieve checkout session"


class PersistenceError(ClubError):
    default_message = "Could not save payment"
