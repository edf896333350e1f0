"""
Persistence gateway errors
"""


class GatewayError(Exception):
    """Base class: a call to the remote service failed"""
    pass


class NetworkError(GatewayError):
    """Connection refused, DNS failure, timeout"""
    pass


class ServerError(GatewayError):
    """Non-2xx response or a payload that cannot be decoded"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ServerError):
    """Target record no longer exists (HTTP 404)"""

    def __init__(self, message: str, record_id: int | None = None):
        super().__init__(message, status_code=404)
        self.record_id = record_id
