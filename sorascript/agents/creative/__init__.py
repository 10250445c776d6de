"""Creative content generation agents"""

# Import agents
from .agent_script import generate_script, polish_script, ScriptGenerationError

# Import utilities
from .util_media import (
    encode_media,
    MediaEncodingError,
    MediaTooLargeError
)

__all__ = [
    # Agents
    'generate_script',
    'polish_script',
    'ScriptGenerationError',
    # Utilities
    'encode_media',
    'MediaEncodingError',
    'MediaTooLargeError',
]
