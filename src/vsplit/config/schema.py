"""Pydantic models for user-authored configuration sections.

The [defaults] table of config.toml and the body of profile YAML files are
validated here before being turned into dataclasses.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vsplit.core.exceptions import InvalidValueError
from vsplit.core.pipeline import validate_pattern, validate_time
from vsplit.core.types import ReencodeMode, RotationPreference


class DefaultsModel(BaseModel):
    """Pydantic model for `split` defaults. Every key is optional."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    segment_time: float | None = Field(default=None, gt=0)
    rotate: str | None = None
    reencode: str | None = None
    vcodec: str | None = Field(default=None, min_length=1)
    crf: int | None = Field(default=None, ge=0, le=63)
    preset: str | None = Field(default=None, min_length=1)
    threads: int | None = Field(default=None, ge=0)
    pattern: str | None = None
    output_dir: Path | None = None
    overwrite: bool | None = None
    workers: int | None = Field(default=None, ge=1)
    timeout: float | None = Field(default=None, ge=0)
    start: str | None = None
    end: str | None = None

    @field_validator("rotate", mode="before")
    @classmethod
    def validate_rotate(cls, v: object) -> str | None:
        """Accept 0/90/180/270/auto, including bare integers from TOML/YAML."""
        if v is None:
            return None
        try:
            return RotationPreference.parse(str(v)).value
        except InvalidValueError as e:
            raise ValueError(str(e)) from e

    @field_validator("reencode")
    @classmethod
    def validate_reencode(cls, v: str | None) -> str | None:
        """Accept auto/always/never."""
        if v is None:
            return None
        try:
            return ReencodeMode.parse(v).value
        except InvalidValueError as e:
            raise ValueError(str(e)) from e

    @field_validator("pattern")
    @classmethod
    def validate_pattern_field(cls, v: str | None) -> str | None:
        """Require exactly one segment index placeholder."""
        if v is None:
            return None
        try:
            return validate_pattern(v)
        except InvalidValueError as e:
            raise ValueError(str(e)) from e

    @field_validator("start", "end", mode="before")
    @classmethod
    def validate_trim_field(cls, v: object) -> str | None:
        """Require FFmpeg time syntax."""
        if v is None:
            return None
        try:
            return validate_time(str(v), "trim")
        except InvalidValueError as e:
            raise ValueError(str(e)) from e

    def overrides(self) -> dict:
        """Return only the keys that were set."""
        return self.model_dump(exclude_none=True)


class ProfileModel(BaseModel):
    """Pydantic model for a profile YAML file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    description: str | None = None
    defaults: DefaultsModel = Field(default_factory=DefaultsModel)


def format_validation_error(error: ValidationError) -> str:
    """Render a pydantic ValidationError as a single readable line."""
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "<root>"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)
