"""Serialisable result models handed from the resolver to the assertion layer."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class CallSpan(BaseModel):
    """Source span of a matched call expression (1-based lines, 0-based cols)."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int


class Diagnostic(BaseModel):
    """Everything the assertion layer needs to explain a failing call.

    ``args`` and ``assignments`` always have one entry per requested argument
    index. An argument that could not be located is an empty string with an
    empty assignment list.
    """

    filename: str = Field(description="Base name of the calling file")
    path: str = Field(description="Absolute path of the calling file")
    line: int = Field(description="Line reported by the calling stack frame")
    source: str = Field(default="", description="Text of the matched call")
    function: str | None = Field(
        default=None,
        description="Name of the function enclosing the call, if any",
    )
    span: CallSpan | None = None
    args: list[str] = Field(default_factory=list)
    assignments: list[list[str]] = Field(default_factory=list)
    related_vars: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_lengths(self) -> Diagnostic:
        if len(self.args) != len(self.assignments):
            msg = "args and assignments must have the same length"
            raise ValueError(msg)
        return self

    @property
    def found(self) -> bool:
        return bool(self.source)


__all__ = ["CallSpan", "Diagnostic"]
