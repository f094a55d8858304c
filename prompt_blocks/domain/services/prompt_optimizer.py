"""LLM-assisted prompt optimization: analyze, preview, selectively apply.

An editor asks the LLM for per-section reduction suggestions on a context's
resolved sections, toggles which ones to keep, previews the result, and
writes the chosen ones back as block (or modifier) overrides.
"""

import asyncio
import enum
import json
import logging
import math
import re
from typing import Iterable, Sequence

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from prompt_blocks.domain.prompts.assembler import join_sections
from prompt_blocks.domain.prompts.errors import (
    OptimizationError,
    OptimizationTimeoutError,
    OverrideWriteError,
)
from prompt_blocks.domain.prompts.types import PromptContext, Section
from prompt_blocks.domain.services.prompt_service import PromptService
from prompt_blocks.llm.client import LLMClient
from prompt_blocks.settings import settings

logger = logging.getLogger(__name__)

OPTIMIZER_FALLBACK_PROMPT = "You are a prompt engineering expert."
DEFAULT_SUMMARY = "Analysis complete."


class SuggestionType(str, enum.Enum):
    REMOVE = "remove"
    SIMPLIFY = "simplify"
    MERGE = "merge"
    RESTRUCTURE = "restructure"


class SuggestionPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class OutputFormat(str, enum.Enum):
    """What the prompt under analysis makes the model produce."""

    PLAIN_TEXT = "plain_text"
    JSON = "json"
    MARKDOWN = "markdown"


# Types whose replacement text is written back on apply
REWRITE_TYPES = frozenset({SuggestionType.SIMPLIFY, SuggestionType.RESTRUCTURE})


def _alias(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(camel, snake)


class OptimizationSuggestion(BaseModel):
    """One proposed change to one section."""

    section_id: str = Field(validation_alias=_alias("section_id", "sectionId"))
    section_title: str = Field(default="", validation_alias=_alias("section_title", "sectionTitle"))
    type: SuggestionType
    priority: SuggestionPriority
    issue: str
    suggestion: str = ""
    original_text: str = Field(default="", validation_alias=_alias("original_text", "originalText"))
    optimized_text: str | None = Field(default=None, validation_alias=_alias("optimized_text", "optimizedText"))
    token_savings: int = Field(default=0, ge=0, validation_alias=_alias("token_savings", "tokenSavings"))

    @field_validator("token_savings", mode="before")
    @classmethod
    def _coerce_savings(cls, value):
        if value is None:
            return 0
        if isinstance(value, float):
            return round(value)
        return value

    @model_validator(mode="after")
    def _require_replacement(self) -> "OptimizationSuggestion":
        if self.type in REWRITE_TYPES and not (self.optimized_text and self.optimized_text.strip()):
            raise ValueError(f"{self.type.value} suggestion for {self.section_id!r} has no optimizedText")
        return self


class _SuggestionPayload(BaseModel):
    suggestions: list[OptimizationSuggestion]
    summary: str | None = None


class OptimizationTransparency(BaseModel):
    """Exactly what was sent to the provider."""

    system_prompt: str
    user_prompt: str
    model: str
    max_tokens: int
    temperature: float


class OptimizationResult(BaseModel):
    suggestions: list[OptimizationSuggestion]
    summary: str
    current_token_estimate: int
    potential_token_estimate: int
    savings_percent: int
    transparency: OptimizationTransparency | None = None


class OptimizationPreview(BaseModel):
    before: str
    after: str
    before_tokens: int
    after_tokens: int


class OptimizationState(str, enum.Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    SUGGESTED = "suggested"
    APPLYING = "applying"


def estimate_tokens(text: str) -> int:
    """Rough token estimate (4 chars ~ 1 token), for relative comparison only."""
    return math.ceil(len(text) / 4)


# ---------------------------------------------------------------------------
# Provider request / response
# ---------------------------------------------------------------------------

OUTPUT_FORMAT_CONTEXT = {
    OutputFormat.JSON: "The prompt produces JSON output, so JSON-related formatting instructions are NECESSARY and should NOT be simplified.",
    OutputFormat.MARKDOWN: "The prompt produces markdown output, so markdown formatting instructions may be NECESSARY depending on use case.",
    OutputFormat.PLAIN_TEXT: "The prompt produces plain text with section headers. Verbose markdown formatting examples are usually UNNECESSARY.",
}

OPTIMIZE_TASK = """

YOUR TASK:
Analyze the provided prompt sections and identify opportunities to reduce token usage while maintaining clarity and effectiveness.

OUTPUT FORMAT CONTEXT:
{output_format_context}

PRIORITY LEVELS:
- high: >30% token reduction possible, or clearly unnecessary content
- medium: 10-30% token reduction, meaningful simplification
- low: <10% improvement, nice-to-have optimizations

RETURN JSON:
{{
  "suggestions": [
    {{
      "sectionId": "section_id",
      "sectionTitle": "Section Title",
      "type": "remove" | "simplify" | "merge" | "restructure",
      "priority": "high" | "medium" | "low",
      "issue": "Brief description of the problem",
      "suggestion": "What to do about it",
      "originalText": "The problematic text (can be excerpt)",
      "optimizedText": "The full replacement text for the section (required for simplify/restructure)",
      "tokenSavings": 50
    }}
  ],
  "summary": "2-3 sentence overall assessment of the prompt's efficiency"
}}

IMPORTANT RULES:
- Only flag REAL issues, not hypothetical ones
- Use only the section ids given below
- tokenSavings should be a realistic estimate
- Maximum {max_suggestions} suggestions, prioritize highest impact"""

OPTIMIZE_USER = """Analyze this "{context}" prompt for optimization opportunities:

{sections}

Current estimated tokens: {current_tokens}
Output format: {output_format}

Return ONLY the JSON object with your analysis."""


def _strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def parse_optimization_response(
    text: str,
    section_ids: Iterable[str],
    max_suggestions: int | None = None,
) -> tuple[list[OptimizationSuggestion], str]:
    """Parse and validate the provider's suggestion payload.

    The payload is accepted or rejected as a whole.

    Returns:
        (suggestions, summary)

    Raises:
        OptimizationError: If the payload is not valid JSON, does not match
            the suggestion schema, or references an unknown section
    """
    max_suggestions = max_suggestions or settings.optimize_max_suggestions
    body = _strip_code_fences(text)
    match = re.search(r"\{.*\}", body, re.DOTALL)
    if match:
        body = match.group()

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        logger.debug(f"Unparseable optimization response: {text[:500]}")
        raise OptimizationError(f"Optimization response is not valid JSON: {e}") from e

    try:
        payload = _SuggestionPayload.model_validate(data)
    except ValidationError as e:
        raise OptimizationError(f"Optimization response has an invalid shape: {e}") from e

    known = set(section_ids)
    for suggestion in payload.suggestions:
        if suggestion.section_id not in known:
            raise OptimizationError(f"Optimization response references unknown section {suggestion.section_id!r}")

    return payload.suggestions[:max_suggestions], payload.summary or DEFAULT_SUMMARY


async def request_optimization(
    llm_client: LLMClient,
    base_system_prompt: str,
    context: str,
    sections: Sequence[Section],
    output_format: OutputFormat = OutputFormat.PLAIN_TEXT,
    timeout: float | None = None,
) -> OptimizationResult:
    """Ask the provider for reduction suggestions on the enabled sections.

    Raises:
        OptimizationError: No enabled sections, provider failure, or a
            malformed payload
        OptimizationTimeoutError: The provider call exceeded ``timeout``
    """
    enabled = [s for s in sections if s.enabled and s.text.strip()]
    if not enabled:
        raise OptimizationError("No enabled sections with content.")

    output_format = OutputFormat(output_format)
    timeout = settings.optimize_timeout_seconds if timeout is None else timeout
    max_tokens = settings.optimize_max_tokens
    temperature = settings.optimize_temperature

    current_tokens = sum(estimate_tokens(s.text) for s in enabled)
    system_prompt = base_system_prompt + OPTIMIZE_TASK.format(
        output_format_context=OUTPUT_FORMAT_CONTEXT[output_format],
        max_suggestions=settings.optimize_max_suggestions,
    )
    user_prompt = OPTIMIZE_USER.format(
        context=context,
        sections="\n\n".join(f"--- SECTION: {s.title} (id: {s.id}) ---\n{s.text}" for s in enabled),
        current_tokens=current_tokens,
        output_format=output_format.value,
    )

    try:
        response = await asyncio.wait_for(
            llm_client.complete(system_prompt, user_prompt, max_tokens=max_tokens, temperature=temperature),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise OptimizationTimeoutError(f"Prompt optimization timed out after {timeout:g}s") from e
    except Exception as e:
        raise OptimizationError(f"Prompt optimization failed: {e}") from e

    suggestions, summary = parse_optimization_response(response, (s.id for s in enabled))

    total_savings = sum(s.token_savings for s in suggestions)
    savings_percent = min(100, round(total_savings / current_tokens * 100)) if current_tokens else 0

    logger.info(
        "Prompt optimization analyzed",
        extra={"context": context, "section_count": len(enabled), "suggestion_count": len(suggestions)},
    )
    return OptimizationResult(
        suggestions=suggestions,
        summary=summary,
        current_token_estimate=current_tokens,
        potential_token_estimate=max(0, current_tokens - total_savings),
        savings_percent=savings_percent,
        transparency=OptimizationTransparency(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=getattr(llm_client, "model_name", "") or "",
            max_tokens=max_tokens,
            temperature=temperature,
        ),
    )


# ---------------------------------------------------------------------------
# Preview and apply
# ---------------------------------------------------------------------------

def build_optimized_preview(
    sections: Sequence[Section],
    suggestions: Sequence[OptimizationSuggestion],
    selected: Iterable[int],
) -> str:
    """Re-assemble the sections with the selected suggestions applied.

    ``remove`` drops a section; other types substitute their replacement
    text when they carry one.
    """
    replacements: dict[str, str | None] = {}
    for index in sorted(set(selected)):
        if not 0 <= index < len(suggestions):
            continue
        suggestion = suggestions[index]
        if suggestion.type is SuggestionType.REMOVE:
            replacements[suggestion.section_id] = None
        elif suggestion.optimized_text:
            replacements[suggestion.section_id] = suggestion.optimized_text

    texts = []
    for section in sections:
        if section.id in replacements:
            replacement = replacements[section.id]
            if replacement is None:
                continue
            texts.append(replacement)
        elif section.enabled:
            texts.append(section.text)
    return join_sections(texts)


async def apply_suggestions(
    service: PromptService,
    context: str,
    sections: Sequence[Section],
    suggestions: Sequence[OptimizationSuggestion],
    selected: Iterable[int],
    updated_by: str | None = None,
) -> list[int]:
    """Write the selected suggestions back as overrides, in index order.

    ``remove`` empties the section for this context, ``simplify`` and
    ``restructure`` replace it; ``merge`` is advisory and writes nothing.
    Block sections patch the context variant, modifier sections patch the
    modifier content. Re-applying a suggestion writes the same patch.

    Returns:
        Indices of the suggestions that were written

    Raises:
        OverrideWriteError: On the first failed write of any kind; ``pending``
            lists the indices not yet applied, including the failed one
    """
    by_id = {section.id: section for section in sections}
    order = [i for i in sorted(set(selected)) if 0 <= i < len(suggestions)]
    applied: list[int] = []

    for position, index in enumerate(order):
        suggestion = suggestions[index]
        section = by_id.get(suggestion.section_id)
        if section is None:
            logger.warning(f"Skipping suggestion {index}: section {suggestion.section_id!r} is not in {context!r}")
            continue

        if suggestion.type is SuggestionType.REMOVE:
            text = ""
        elif suggestion.type in REWRITE_TYPES:
            text = suggestion.optimized_text or ""
        else:
            continue

        try:
            if section.kind == "modifier":
                await service.apply_modifier_override(section.id, content=text, updated_by=updated_by)
            else:
                await service.apply_block_override(section.id, variants={context: text}, updated_by=updated_by)
        except OverrideWriteError as e:
            raise OverrideWriteError(str(e), pending=order[position:]) from e
        except Exception as e:
            logger.error(f"Failed to apply suggestion {index} to {section.id!r}: {e}")
            raise OverrideWriteError(
                f"Failed to apply suggestion {index}: {e}", pending=order[position:]
            ) from e
        applied.append(index)

    logger.info(
        "Prompt optimization applied",
        extra={"context": context, "applied": applied, "updated_by": updated_by},
    )
    return applied


class OptimizationSession:
    """In-memory optimization session for one context.

    States: idle -> analyzing -> suggested -> applying -> idle. A failed
    analysis returns to idle with ``error`` set and no suggestions kept; a
    failed or cancelled apply returns to suggested.
    """

    def __init__(
        self,
        service: PromptService,
        llm_client: LLMClient,
        context: str,
        mode: str | None = None,
        domains: Sequence[str] | None = None,
        output_format: OutputFormat = OutputFormat.PLAIN_TEXT,
    ) -> None:
        self.service = service
        self.llm_client = llm_client
        self.context = context
        self.mode = mode
        self.domains = list(domains or [])
        self.output_format = OutputFormat(output_format)
        self.state = OptimizationState.IDLE
        self.error: str | None = None
        self.sections: list[Section] = []
        self.result: OptimizationResult | None = None
        self.selected: set[int] = set()

    def _reset(self) -> None:
        self.state = OptimizationState.IDLE
        self.sections = []
        self.result = None
        self.selected = set()

    @property
    def suggestions(self) -> list[OptimizationSuggestion]:
        return self.result.suggestions if self.result else []

    async def analyze(self, timeout: float | None = None) -> OptimizationResult:
        """Request suggestions for the context's current sections.

        All returned suggestions start out selected.
        """
        if self.state in (OptimizationState.ANALYZING, OptimizationState.APPLYING):
            raise OptimizationError(f"Optimization session is busy ({self.state.value})")

        self._reset()
        self.error = None
        self.state = OptimizationState.ANALYZING
        try:
            sections = await self.service.list_sections(self.context, mode=self.mode, domains=self.domains)
            base_prompt = await self.service.load_system_prompt(
                PromptContext.PROMPT_OPTIMIZE.value, OPTIMIZER_FALLBACK_PROMPT
            )
            result = await request_optimization(
                self.llm_client,
                base_prompt,
                self.context,
                sections,
                output_format=self.output_format,
                timeout=timeout,
            )
            self.sections = sections
            self.result = result
            self.selected = set(range(len(result.suggestions)))
            self.state = OptimizationState.SUGGESTED
        except Exception as e:
            logger.warning(f"Prompt optimization failed for {self.context!r}: {e}")
            self.error = str(e)
            raise
        finally:
            if self.state is OptimizationState.ANALYZING:
                self._reset()
        return result

    def _require_suggested(self) -> None:
        if self.state is not OptimizationState.SUGGESTED:
            raise OptimizationError(f"No suggestions available (session is {self.state.value})")

    def toggle(self, index: int) -> bool:
        """Flip selection of one suggestion. Returns True if now selected."""
        self._require_suggested()
        if not 0 <= index < len(self.suggestions):
            raise IndexError(f"No suggestion at index {index}")
        if index in self.selected:
            self.selected.discard(index)
            return False
        self.selected.add(index)
        return True

    def select(self, indices: Iterable[int]) -> None:
        """Replace the selection."""
        self._require_suggested()
        indices = set(indices)
        for index in indices:
            if not 0 <= index < len(self.suggestions):
                raise IndexError(f"No suggestion at index {index}")
        self.selected = indices

    def preview(self) -> OptimizationPreview:
        """Before/after text and token estimates for the current selection."""
        self._require_suggested()
        before = join_sections(s.text for s in self.sections if s.enabled)
        after = build_optimized_preview(self.sections, self.suggestions, self.selected)
        return OptimizationPreview(
            before=before,
            after=after,
            before_tokens=estimate_tokens(before),
            after_tokens=estimate_tokens(after),
        )

    async def apply(self, updated_by: str | None = None) -> list[int]:
        """Write the selected suggestions and return to idle.

        On a write failure the session stays in ``suggested`` with only the
        unapplied suggestions selected, so calling ``apply`` again retries
        the remainder.
        """
        self._require_suggested()
        self.state = OptimizationState.APPLYING
        try:
            applied = await apply_suggestions(
                self.service,
                self.context,
                self.sections,
                self.suggestions,
                self.selected,
                updated_by=updated_by,
            )
            self._reset()
        except OverrideWriteError as e:
            self.selected = set(e.pending)
            self.error = str(e)
            raise
        finally:
            if self.state is OptimizationState.APPLYING:
                self.state = OptimizationState.SUGGESTED
        return applied
