from typing import List, Sequence


class EvidenceError(Exception):
    pass


class EvidenceConfigError(EvidenceError):
    """Evidence API credentials are not configured."""

    def __init__(self, missing: List[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Evidence.com API credentials not configured. Missing: {', '.join(missing)}"
        )


class EvidenceFetchError(EvidenceError):
    """Every endpoint/auth combination failed."""

    def __init__(self, what: str, attempts: Sequence[object]) -> None:
        """
        Parameters:
            what (str): Human-readable name of the resource that could not be fetched.
            attempts (Sequence[AttemptErr]): Failed attempts in the order they were made.
        """
        self.attempts = list(attempts)
        last = str(self.attempts[-1]) if self.attempts else "no attempts made"
        super().__init__(f"Failed to fetch {what} from any endpoint. Last error: {last}")


class UnrecognizedShapeError(EvidenceError):
    """A successful response did not match any known payload schema."""

    def __init__(self, keys: List[str]) -> None:
        self.keys = keys
        super().__init__(
            f"Unrecognized evidence response shape (keys: {', '.join(keys) or 'none'})"
        )
