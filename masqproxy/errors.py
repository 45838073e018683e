class ProxyError(Exception):
    """Base for errors that reach the proxy caller as a plain-text response."""

    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class BadRequest(ProxyError):
    status_code = 400


class PolicyDenied(ProxyError):
    status_code = 403


class UpstreamFailure(ProxyError):
    status_code = 500

    @classmethod
    def from_exception(cls, exc):
        return cls(f"Error fetching the requested URL: {exc}")
