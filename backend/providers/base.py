from abc import ABC, abstractmethod


class BaseProvider(ABC):
    """Abstract base class for hosted LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of this provider (e.g. 'openrouter')."""
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        """The model identifier requests are sent to."""
        ...

    @abstractmethod
    async def chat(self, messages: list[dict], max_tokens: int = 1000, temperature: float = 0.7) -> dict:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            max_tokens: Completion length limit.
            temperature: Sampling temperature.

        Returns:
            dict with keys:
                - text: str | None  — the generated text
                - provider: str     — provider name
                - model: str        — model used
                - status: "success" | "failed"
                - error: str | None — error message on failure
        """
        ...

    @abstractmethod
    async def list_models(self) -> list[str] | None:
        """Model ids the account can use, or None if the provider is unreachable."""
        ...
