"""
Gemini Schemas
==============
Pydantic models for the cost-relevant parts of a Gemini API response.
"""

from pydantic import BaseModel, ConfigDict, Field


class _GeminiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GeminiUsageMetadata(_GeminiModel):
    """The ``usageMetadata`` block of a Gemini response."""

    prompt_token_count: int = Field(default=0, alias="promptTokenCount")
    candidates_token_count: int = Field(default=0, alias="candidatesTokenCount")
    cached_content_token_count: int = Field(default=0, alias="cachedContentTokenCount")
    # Already part of the billed input for Google models
    tool_use_prompt_token_count: int = Field(default=0, alias="toolUsePromptTokenCount")
    # Charged at the output rate
    thoughts_token_count: int = Field(default=0, alias="thoughtsTokenCount")


class GeminiGroundingMetadata(_GeminiModel):
    web_search_queries: list[str] = Field(default_factory=list, alias="webSearchQueries")


class GeminiPart(_GeminiModel):
    text: str = ""
    thought_signature: str = Field(default="", alias="thoughtSignature")


class GeminiContent(_GeminiModel):
    parts: list[GeminiPart] = Field(default_factory=list)
    role: str = ""


class GeminiCandidate(_GeminiModel):
    content: GeminiContent = Field(default_factory=GeminiContent)
    finish_reason: str = Field(default="", alias="finishReason")
    grounding_metadata: GeminiGroundingMetadata | None = Field(
        default=None, alias="groundingMetadata"
    )


class GeminiResponse(_GeminiModel):
    """A full Gemini ``generateContent`` response."""

    candidates: list[GeminiCandidate] = Field(default_factory=list)
    usage_metadata: GeminiUsageMetadata = Field(
        default_factory=GeminiUsageMetadata, alias="usageMetadata"
    )
    model_version: str = Field(default="", alias="modelVersion")

    def grounding_query_count(self) -> int:
        """Number of non-empty web search queries across all candidates."""
        return sum(
            1
            for candidate in self.candidates
            if candidate.grounding_metadata is not None
            for query in candidate.grounding_metadata.web_search_queries
            if query
        )
