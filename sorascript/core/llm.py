"""Gemini LLM integration for script generation"""

import base64
import logging
from typing import Any, Dict, List, Optional
from langchain_core.callbacks import CallbackManagerForLLMRun
from langchain_core.language_models.llms import LLM
from google import genai
from google.genai import types
from .config import GEMINI_API_KEY, GEMINI_MODEL, PROJECT_ID, LOCATION, get_credentials

logger = logging.getLogger(__name__)


class GeminiLLM(LLM):
    """Gemini LLM implementation using the Gemini API or Vertex AI"""

    model_name: str = GEMINI_MODEL
    api_key: Optional[str] = GEMINI_API_KEY
    location: str = LOCATION
    gemini_configs: Dict = {
        'temperature': None,  # None leaves the model default in place
    }
    client: Any = None  # Preconfigured genai.Client (tests inject a fake here)

    def __init__(self, **kwargs):
        """Initialize with custom parameters"""
        super().__init__()
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def setup_gemini(self):
        """Initialize Gemini client: API key when configured, otherwise Vertex AI"""
        if self.client is not None:
            return self.client
        if self.api_key:
            return genai.Client(api_key=self.api_key)
        return genai.Client(
            vertexai=True,
            project=PROJECT_ID,
            location=self.location,
            credentials=get_credentials()
        )

    def build_contents(self, prompt: str, media: Optional[List[Dict[str, str]]] = None) -> List[Any]:
        """Media parts in the given order, prompt text always last

        Args:
            prompt: Instruction text
            media: Universal format items {"data": base64 str, "media_type": str}
        """
        contents = []
        for item in media or []:
            contents.append(types.Part.from_bytes(
                data=base64.b64decode(item['data']),
                mime_type=item['media_type']
            ))
        contents.append(types.Part.from_text(text=prompt))
        return contents

    def _call(
        self,
        prompt: str,
        stop: Optional[List[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        media: Optional[List[Dict[str, str]]] = None,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> str:
        """Single generate_content round trip; errors propagate to the caller"""
        client = self.setup_gemini()
        contents = self.build_contents(prompt, media)

        config_params = {}
        if temperature is None:
            temperature = self.gemini_configs.get('temperature')
        if temperature is not None:
            config_params["temperature"] = temperature
        if stop:
            config_params["stop_sequences"] = stop
        config = types.GenerateContentConfig(**config_params) if config_params else None

        logger.info(
            f"[Gemini LLM] generate_content model={self.model_name} "
            f"parts={len(contents)} temperature={config_params.get('temperature')}"
        )

        response = client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=config
        )

        return response.text or ""

    @property
    def _identifying_params(self) -> Dict[str, Any]:
        return {"model_name": self.model_name}

    @property
    def _llm_type(self):
        return "gemini"


def get_llm(**kwargs):
    """Get Gemini LLM instance

    Args:
        **kwargs: Configuration parameters passed to GeminiLLM

    Returns:
        GeminiLLM instance
    """
    # Remove any model parameter (always use Gemini)
    kwargs.pop('model', None)
    return GeminiLLM(**kwargs)
