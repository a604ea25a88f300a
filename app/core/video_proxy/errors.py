class VideoProxyError(Exception):
    """Request rejected before any upstream call was made."""

    def __init__(self, status_code: int, message: str) -> None:
        """
        Initialize the error with the HTTP status and client-visible message.

        Parameters:
            status_code (int): Status returned to the caller (400 for bad input, 500 for misconfiguration).
            message (str): Value of the `error` field in the JSON body.
        """
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class MissingUrlError(VideoProxyError):
    def __init__(self) -> None:
        super().__init__(400, "Video URL is required")


class InvalidUrlError(VideoProxyError):
    def __init__(self) -> None:
        super().__init__(400, "Invalid video URL")


class ApiKeyMissingError(VideoProxyError):
    def __init__(self) -> None:
        super().__init__(500, "Server configuration error: API key not set")
