"""Schemas for entries written into the gateway configuration.

These models build new entries; they are not used to validate a loaded
document, which may contain anything the gateway understands.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

MAX_TOKENS_CAP = 8192


class ApiMode(str, Enum):
    """Wire API a provider speaks."""

    OPENAI_COMPLETIONS = "openai-completions"
    OPENAI_RESPONSES = "openai-responses"


class _ConfigEntry(BaseModel):
    """Base for entries serialized with the gateway's camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_config(self) -> dict[str, Any]:
        """Dump as a plain JSON-ready mapping using the persisted key names."""
        return self.model_dump(by_alias=True, mode="json")


class ModelCost(_ConfigEntry):
    """Per-token pricing of a model."""

    input: int | float = Field(default=0, ge=0)
    output: int | float = Field(default=0, ge=0)


class ModelEntry(_ConfigEntry):
    """A model offered by a provider."""

    id: str = Field(..., min_length=1, description="Model identifier sent to the provider")
    display_name: str = Field(..., alias="name", description="Label shown in the UI")
    supports_reasoning: bool = Field(default=False, alias="reasoning")
    input_modalities: list[str] = Field(default_factory=lambda: ["text"], alias="input")
    cost: ModelCost = Field(default_factory=ModelCost)
    context_window: int = Field(..., gt=0, alias="contextWindow")

    @computed_field(alias="maxTokens")
    @property
    def max_tokens(self) -> int:
        return derive_max_tokens(self.context_window)


class ProviderEntry(_ConfigEntry):
    """Connection settings of an upstream model server."""

    base_url: str = Field(..., alias="baseUrl")
    api_key: str = Field(..., alias="apiKey")
    api: ApiMode = ApiMode.OPENAI_COMPLETIONS
    auth_header: bool = Field(default=False, alias="authHeader")
    models: list[ModelEntry] = Field(default_factory=list)

    def required_fields(self) -> dict[str, Any]:
        """The keys every run writes, regardless of what was persisted."""
        return self.to_config(exclude={"models"})

    def to_config(self, exclude: set[str] | None = None) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude=exclude)


class DefaultModelSelector(_ConfigEntry):
    """The ``agents.defaults.model`` selector."""

    primary: str

    @classmethod
    def for_model(cls, provider: str, model_id: str) -> "DefaultModelSelector":
        return cls(primary=f"{provider}/{model_id}")


def derive_max_tokens(context_window: int) -> int:
    """Output token budget for a context window: a quarter, capped at 8192."""
    return min(MAX_TOKENS_CAP, context_window // 4)
