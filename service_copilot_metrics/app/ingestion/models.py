"""
Copilot usage-metrics document models.

Mirrors the GitHub "Copilot metrics" REST payload. Every counter other than
``total_engaged_users`` is optional: ``None`` means the API did not report
it, which is different from a reported zero.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Entry(BaseModel):
    """Fields shared by every named breakdown entry."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    total_engaged_users: int = Field(..., ge=0)


class LanguageMetrics(_Entry):
    """Per-language code completion breakdown."""

    total_code_suggestions: Optional[int] = Field(default=None, ge=0)
    total_code_acceptances: Optional[int] = Field(default=None, ge=0)
    total_code_lines_suggested: Optional[int] = Field(default=None, ge=0)
    total_code_lines_accepted: Optional[int] = Field(default=None, ge=0)


class ModelMetrics(_Entry):
    """Per-model breakdown; the populated counters depend on the feature."""

    is_custom_model: bool = False
    custom_model_training_date: Optional[str] = None
    total_chats: Optional[int] = Field(default=None, ge=0)
    total_chat_insertion_events: Optional[int] = Field(default=None, ge=0)
    total_chat_copy_events: Optional[int] = Field(default=None, ge=0)
    total_pr_summaries_created: Optional[int] = Field(default=None, ge=0)
    languages: Optional[List[LanguageMetrics]] = None


class EditorMetrics(_Entry):
    """Per-editor breakdown."""

    models: Optional[List[ModelMetrics]] = None


class RepositoryMetrics(_Entry):
    """Per-repository pull request breakdown."""

    models: Optional[List[ModelMetrics]] = None


class _FeatureBlock(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    total_engaged_users: int = Field(..., ge=0)


class IdeCodeCompletions(_FeatureBlock):
    languages: Optional[List[LanguageMetrics]] = None
    editors: Optional[List[EditorMetrics]] = None


class IdeChat(_FeatureBlock):
    editors: Optional[List[EditorMetrics]] = None


class DotcomChat(_FeatureBlock):
    models: Optional[List[ModelMetrics]] = None


class DotcomPullRequests(_FeatureBlock):
    repositories: Optional[List[RepositoryMetrics]] = None


class MetricsSnapshot(BaseModel):
    """One dated Copilot usage observation for a scope."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    date: str
    total_active_users: Optional[int] = Field(default=None, ge=0)
    total_engaged_users: Optional[int] = Field(default=None, ge=0)
    copilot_ide_code_completions: Optional[IdeCodeCompletions] = None
    copilot_ide_chat: Optional[IdeChat] = None
    copilot_dotcom_chat: Optional[DotcomChat] = None
    copilot_dotcom_pull_requests: Optional[DotcomPullRequests] = None

    def feature_summary(self) -> dict:
        """Engaged users per populated feature block, for logging."""
        blocks = {
            "ide_code_completions": self.copilot_ide_code_completions,
            "ide_chat": self.copilot_ide_chat,
            "dotcom_chat": self.copilot_dotcom_chat,
            "dotcom_pull_requests": self.copilot_dotcom_pull_requests,
        }
        return {name: block.total_engaged_users for name, block in blocks.items() if block is not None}
