"""Configuration models for the reconciler."""

from typing import List

from pydantic import BaseModel, Field, ConfigDict, field_validator

from gphotos_reconcile.common import LoggingConfig


class ReconcilerConfig(BaseModel):
    """Reconciliation settings."""

    model_config = ConfigDict(extra='forbid')

    target_media_path: str = Field(
        default="",
        description="Folder with the extracted Takeout media to reconcile"
    )
    tryhard: bool = Field(
        default=True,
        description="Also try historical Google Takeout sidecar naming variants"
    )
    chunk_size: int = Field(
        default=50,
        ge=1,
        description="Number of files per external batch write call"
    )
    failure_markers: List[str] = Field(
        default_factory=lambda: ["Error:"],
        description="Literal markers of per-file failure lines in write diagnostics"
    )
    diagnostic_separator: str = Field(
        default=" - ",
        min_length=1,
        description="Literal token between failure message and path"
    )
    diagnostic_trailing: str | None = Field(
        default=None,
        min_length=1,
        description="Optional literal token ending the path on a failure line (None: end of line)"
    )
    progress_log_interval: int = Field(
        default=100,
        ge=1,
        description="Log progress every N records"
    )
    exiftool_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout for one exiftool invocation (None: no timeout)"
    )

    @field_validator('failure_markers', mode='before')
    @classmethod
    def split_markers(cls, v):
        """Accept a single marker string (e.g. from an environment variable)."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator('failure_markers')
    @classmethod
    def require_markers(cls, v: List[str]) -> List[str]:
        markers = [m for m in v if m]
        if not markers:
            raise ValueError("at least one non-empty failure marker is required")
        return markers


class ReconcilerAppConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reconciler: ReconcilerConfig = Field(default_factory=ReconcilerConfig)
