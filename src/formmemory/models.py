"""Pydantic models for the form memory engine.

Store responses are parsed field by field: a missing or malformed field falls
back to its default instead of rejecting the whole record.
"""

from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from .config import DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD
from .utils import ensure_utc


class _LenientModel(BaseModel):
    """Base model whose fields default instead of failing validation."""

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_error(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class FormAnalytics(_LenientModel):
    """Outcome statistics recorded for an AI-generated form."""

    model_config = ConfigDict(extra="allow")

    success_score: float | None = None  # 0-10
    generated_field_count: int | None = None
    generated_field_types: list[str] | None = None

    @field_validator("generated_field_types", mode="before")
    @classmethod
    def _keep_string_types(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [item for item in value if isinstance(item, str)]
        return value


class MemoryMetadata(_LenientModel):
    """Open metadata attached to a memory; only the known keys are typed."""

    model_config = ConfigDict(extra="allow")

    ai_form_analytics: FormAnalytics | None = None
    original_prompt: str | None = None


class MemoryRecord(_LenientModel):
    """A historical interaction snapshot returned by the memory store."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(default="", alias="memory")
    metadata: MemoryMetadata = Field(default_factory=MemoryMetadata)
    created_at: datetime | None = None
    relevance_score: float = Field(default=0.0, exclude=True)

    @field_validator("created_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @property
    def analytics(self) -> FormAnalytics | None:
        return self.metadata.ai_form_analytics

    @property
    def success_score(self) -> float | None:
        analytics = self.analytics
        return analytics.success_score if analytics else None

    def is_successful(self, threshold: float = DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD) -> bool:
        """Whether the recorded success score reaches ``threshold``."""
        score = self.success_score
        return score is not None and score >= threshold


class SearchResult(BaseModel):
    """Records returned by a search, in store order or ranked order."""

    records: list[MemoryRecord] = Field(default_factory=list)
    total_count: int = 0

    @classmethod
    def empty(cls) -> "SearchResult":
        return cls(records=[], total_count=0)


class OperationResult(_LenientModel):
    """Acknowledgement of a memory write."""

    success: bool = False
    message: str = ""


class UserContext(_LenientModel):
    """Free-text context the store assembled for a user and query."""

    context: str = ""
    memories_count: int = 0


class FormHistory(_LenientModel):
    """Past interactions with a user's forms."""

    interactions: list[dict[str, Any]] = Field(default_factory=list)
    total_count: int = 0


class UserPreferences(_LenientModel):
    """Preferences the store has recorded for a user."""

    preferences: dict[str, Any] = Field(default_factory=dict)
    total_count: int = 0


class InsightStats(BaseModel):
    """Summary statistics for a synthesized insight."""

    model_config = ConfigDict(frozen=True)

    total_similar: int = 0
    successful_count: int = 0
    avg_relevance: float = 0.0  # 0-100


class Insight(BaseModel):
    """Natural-language summary of ranked memories."""

    model_config = ConfigDict(frozen=True)

    summary_lines: tuple[str, ...] = ()
    stats: InsightStats = Field(default_factory=InsightStats)

    @property
    def is_empty(self) -> bool:
        return not self.summary_lines


class PromptEnhancement(BaseModel):
    """Memory material gathered for enhancing a form-generation prompt."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    memory_context: str = ""
    successful_examples: str = ""
    fallback_prompt: str = ""

    @property
    def has_memory(self) -> bool:
        return bool(self.memory_context or self.successful_examples)
