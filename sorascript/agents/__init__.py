"""Agent implementations for the script generation workflow"""

# Import creative agents
from .creative.agent_script import generate_script, polish_script, ScriptGenerationError


__all__ = [
    'generate_script',
    'polish_script',
    'ScriptGenerationError'
]
