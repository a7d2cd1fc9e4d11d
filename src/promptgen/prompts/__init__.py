"""
Prompt templates: models, placeholder rendering and input resolution.

The version chain (``promptgen.prompts.manager``) and the generation
pipeline (``promptgen.prompts.generator``) build on the storage layer and
are imported from their modules directly.
"""

from .inputs import ResolvedInput, build_sources, resolve_input
from .models import PromptTemplate, TemplateSummary, validate_template_name
from .renderer import PromptRenderer

__all__ = [
    "PromptRenderer",
    "PromptTemplate",
    "ResolvedInput",
    "TemplateSummary",
    "build_sources",
    "resolve_input",
    "validate_template_name",
]
