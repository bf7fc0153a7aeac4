class RepoCardError(Exception):
    """Base exception for repocard failures."""
    pass


class UpstreamUnavailable(RepoCardError):
    """Raised when GitHub could not be reached and nothing cached can stand in."""
    def __init__(self, message: str = "Failed to fetch star count"):
        super().__init__(message)


class DataValidationFailure(RepoCardError):
    """Raised when GitHub returned a value outside the accepted range."""
    def __init__(self, value, message: str = "Invalid data received"):
        self.value = value
        super().__init__(f"{message}: {value!r}")
