import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Azure DevOps organization and personal access token used by the REST client
AZDO_ORGANIZATION: Optional[str] = os.environ.get("AZDO_ORGANIZATION")
AZDO_PAT: Optional[str] = os.environ.get("AZDO_PAT")

# Service roots. Identities and graph live on vssps, security on the main host.
AZDO_BASE_URL: str = os.environ.get("AZDO_BASE_URL", "https://dev.azure.com").rstrip("/")
AZDO_VSSPS_URL: str = os.environ.get("AZDO_VSSPS_URL", "https://vssps.dev.azure.com").rstrip("/")

AZDO_API_VERSION: str = os.environ.get("AZDO_API_VERSION", "7.1")
AZDO_GRAPH_API_VERSION: str = os.environ.get("AZDO_GRAPH_API_VERSION", "7.1-preview.1")

# Seconds before a single REST call is abandoned
AZDO_REQUEST_TIMEOUT: float = float(os.environ.get("AZDO_REQUEST_TIMEOUT", "30"))

# If true, identity search tries every filter before deciding instead of
# failing on the first ambiguous filter result
IDENTITY_SEARCH_EXHAUSTIVE: bool = os.environ.get("IDENTITY_SEARCH_EXHAUSTIVE") == "1"

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

# Allow requests from this origin
ALLOW_ORIGIN: Optional[str] = os.environ.get("ALLOW_ORIGIN")

# If true, enable docs and openapi.json endpoints
ENABLE_DOCS: bool = os.environ.get("ENABLE_DOCS") == "1"
