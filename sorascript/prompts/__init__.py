"""Prompt templates for script generation

This module re-exports the prompts and builders from their individual modules.
"""

from .script import (
    OVERALL_HEADER,
    SHOTS_HEADER,
    MUSIC_HEADER,
    SECTION_HEADERS,
    DEFAULT_REFERENCE_SCRIPT,
    build_generation_prompt,
    build_polish_prompt
)

__all__ = [
    # Section markers
    'OVERALL_HEADER',
    'SHOTS_HEADER',
    'MUSIC_HEADER',
    'SECTION_HEADERS',
    # Templates
    'DEFAULT_REFERENCE_SCRIPT',
    # Builders
    'build_generation_prompt',
    'build_polish_prompt'
]
