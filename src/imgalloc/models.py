#!/usr/bin/env python3
"""
Pydantic models for imgalloc settings validation.
"""

import io
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    """Runtime settings for the image commands."""

    allocator: Literal["auto", "native", "portable"] = Field(
        default="auto", description="Allocation strategy: auto|native|portable"
    )
    chunk_size: int = Field(
        default=io.DEFAULT_BUFFER_SIZE,
        ge=512,
        le=64 * 1024 * 1024,
        description="Block size for the portable zero-fill writer",
    )
    file_mode: int = Field(default=0o666, ge=0, le=0o7777, description="Creation mode before umask")
    checked_sizes: bool = Field(default=False, description="Reject sizes that overflow")
    log_level: str = Field(default="WARNING", description="Log level")
    json_logs: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_valid(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {sorted(valid_levels)}")
        return v

    @field_validator("file_mode", mode="before")
    @classmethod
    def parse_octal_mode(cls, v):
        # YAML and environment values arrive as strings like "0644".
        if isinstance(v, str):
            try:
                return int(v, 8)
            except ValueError:
                raise ValueError(f"file_mode must be an octal number, got {v!r}")
        return v
