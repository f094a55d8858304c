"""Errors raised by the prompt blocks system."""


class PromptSystemError(Exception):
    """Base error for the prompt blocks system."""


class RegistryError(PromptSystemError):
    """The built-in block/modifier registry is inconsistent."""


class UnknownPromptEntityError(PromptSystemError):
    """A block or modifier id does not exist in the registry."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"Unknown prompt {kind}: {entity_id}")


class OverrideWriteError(PromptSystemError):
    """An override could not be persisted."""

    def __init__(self, message: str, pending: list[int] | None = None):
        # Suggestion indices still waiting to be applied, when raised from an apply
        self.pending = list(pending or [])
        super().__init__(message)


class OptimizationError(PromptSystemError):
    """The optimization analysis failed or returned an unusable payload."""


class OptimizationTimeoutError(OptimizationError):
    """The optimization provider call exceeded its timeout."""
