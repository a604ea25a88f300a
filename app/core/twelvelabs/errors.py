from typing import Optional


class TwelveLabsError(Exception):
    pass


class TwelveLabsConfigError(TwelveLabsError):
    """The video AI API key is not configured."""

    def __init__(self) -> None:
        super().__init__("API key not configured")


class TwelveLabsApiError(TwelveLabsError):
    """The video AI API answered with an error or an unusable body."""

    def __init__(
        self, action: str, reason: str, status: Optional[int] = None, text: str = ""
    ) -> None:
        """
        Parameters:
            action (str): What was attempted, e.g. "List indexes".
            reason (str): Upstream reason phrase or transport error message.
            status (Optional[int]): Upstream HTTP status, when a response arrived.
            text (str): Excerpt of the upstream response body.
        """
        self.action = action
        self.reason = reason
        self.status = status
        self.text = text
        detail = f"{reason} - {text}" if text else reason
        super().__init__(f"{action} failed: {detail}")


class InvalidAnalysisTypeError(TwelveLabsError):
    def __init__(self, analysis_type: object) -> None:
        self.analysis_type = analysis_type
        super().__init__(
            "Invalid analysis type. Use: summary, chapters, highlights, topics, hashtags, or title"
        )
