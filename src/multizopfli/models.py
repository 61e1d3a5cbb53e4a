"""Pydantic models for run configuration and results"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class OutputMode(str, Enum):
    """Where zopflipng writes its result."""

    IN_PLACE = 'in-place'  # output path == input path
    TEMP = 'temp'  # write a sibling file, then move it over the input


class RunOptions(BaseModel):
    """Configuration resolved once at startup and shared read-only by every task."""

    model_config = ConfigDict(frozen=True)

    concurrency: PositiveInt = Field(..., examples=[4], description='Maximum concurrent zopflipng processes')
    flags: tuple[str, ...] = Field(
        default=(), examples=[('-m', '--iterations=20')], description='Flags forwarded verbatim to zopflipng'
    )
    mode: OutputMode = Field(default=OutputMode.IN_PLACE, description='In-place or compress-to-temp-then-replace')
    executable: str = Field(default='zopflipng', description='zopflipng executable name or path')


class RunSummary(BaseModel):
    """Final totals of a run.

    Attributes:
        succeeded: Files whose compression completed
        total: Files attempted, including ones that could not be measured
        total_before: Sum of before-sizes of succeeded files only
        total_after: Sum of after-sizes of succeeded files
        saved_bytes: total_before - total_after
        saved_percent: Percentage saved, rounded to one decimal
        failed: Paths whose task failed
        probe_failed: Paths that could not be measured before compression
    """

    succeeded: int = Field(..., examples=[1])
    total: int = Field(..., examples=[2])
    total_before: int = Field(..., examples=[100000])
    total_after: int = Field(..., examples=[60000])
    saved_bytes: int = Field(..., examples=[40000])
    saved_percent: float = Field(..., examples=[40.0])
    failed: list[str] = Field(default_factory=list, examples=[['b.png']])
    probe_failed: list[str] = Field(default_factory=list, examples=[[]])

    @property
    def ok(self) -> bool:
        return not self.failed and not self.probe_failed
