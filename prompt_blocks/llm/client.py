"""LLM client interface."""

from abc import ABC, abstractmethod


class LLMGenerationError(Exception):
    """The LLM provider failed to produce a response."""


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    model_name: str = ""

    @abstractmethod
    async def generate(self, prompt: str, context: dict | None = None) -> str:
        """Generate a response from the LLM.

        Args:
            prompt: The prompt to send to the LLM
            context: Optional parameters (system_instruction, temperature,
                max_tokens)

        Returns:
            The generated response text
        """
        pass

    async def complete(
        self,
        system_text: str,
        user_text: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Run a single completion with a system instruction.

        Args:
            system_text: System instruction for the model
            user_text: User message
            max_tokens: Maximum output tokens
            temperature: Sampling temperature

        Returns:
            The generated response text
        """
        return await self.generate(
            user_text,
            {
                "system_instruction": system_text,
                "max_tokens": max_tokens,
                "temperature": temperature,
            },
        )
