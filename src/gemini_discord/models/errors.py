"""Exceptions raised by the LLM provider seam."""


class LLMProviderError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        model: str = "",
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.is_retryable = is_retryable


class AuthenticationError(LLMProviderError):
    """Raised when the API key is missing or rejected."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=False)


class ModelNotFoundError(LLMProviderError):
    """Raised when the requested model is not found."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=False)
