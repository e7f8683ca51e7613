"""Output schemas requested from the vision model."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InterpretationPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    interpreted_equation: str = Field(
        validation_alias=AliasChoices("interpretedEquation", "interpretedText", "interpreted_equation"),
        description="The interpreted math equation in a readable text format.",
    )


class SolutionPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    solution: str = Field(
        min_length=1,
        validation_alias=AliasChoices("solutionLaTeX", "solution"),
        description="The step-by-step solution in Markdown with LaTeX math.",
    )


class CombinedSolutionPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    interpreted_text: str = Field(
        validation_alias=AliasChoices("interpretedText", "interpretedEquation", "interpreted_text"),
        description="The interpreted text or description of the drawing.",
    )
    solution: str = Field(
        default="",
        validation_alias=AliasChoices("solution", "solutionLaTeX"),
        description="Markdown solution with LaTeX equations.",
    )
