"""Configuration and setup for the SoraScript service"""

import os
import json
from dotenv import load_dotenv
from google.oauth2 import service_account

# Load environment variables
load_dotenv()

# Gemini API key (AI Studio). When unset the client falls back to Vertex AI.
GEMINI_API_KEY = os.getenv('GEMINI_API_KEY') or os.getenv('API_KEY')

# GCP Configuration (Vertex AI fallback)
PROJECT_ID = os.getenv('GCP_PROJECT_ID')
LOCATION = os.getenv('GOOGLE_CLOUD_REGION', 'us-central1')

# Model Configuration
GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-2.5-flash')
SCRIPT_TEMPERATURE = 0.7

# Upload limits
MAX_REFERENCE_VIDEO_BYTES = 20 * 1024 * 1024  # enforced before any model call
MAX_PRODUCT_IMAGE_BYTES = 10 * 1024 * 1024  # shown on the upload label only

# Video Production Configuration
VIDEO_DURATIONS = ["10s", "15s", "30s", "60s", "120s"]
DEFAULT_VIDEO_DURATION = "15s"
REFERENCE_TYPES = ["script", "video"]

# Session Configuration
SESSION_TTL_SECONDS = int(os.getenv('SESSION_TTL_SECONDS', '86400'))  # 24 hours

# CORS origins, comma separated
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ALLOW_ORIGINS', '*').split(',')
    if origin.strip()
]

_CREDENTIALS = None


def get_credentials():
    """Load service account credentials for Vertex AI, once.

    Returns None when no `credentials_dict` is configured so the SDK can use
    application default credentials instead.
    """
    global _CREDENTIALS
    if _CREDENTIALS is not None:
        return _CREDENTIALS

    credentials_json = os.getenv('credentials_dict')
    if not credentials_json:
        return None

    credentials_info = json.loads(credentials_json)
    _CREDENTIALS = service_account.Credentials.from_service_account_info(
        credentials_info,
        scopes=['https://www.googleapis.com/auth/cloud-platform']
    )
    return _CREDENTIALS
