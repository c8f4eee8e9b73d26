"""
Configuration management for the Ollama Context CLI.
"""
import os
import json

CURRENT_DIR = os.getcwd()

HOST_CONFIG_FILENAME = "ollama_host.conf"

DEFAULT_HOST_CONFIG_FILE = os.environ.get(
    "OLLAMA_HOST_CONFIG",
    os.path.join(CURRENT_DIR, HOST_CONFIG_FILENAME)
)

# API configuration
DEFAULT_API_BASE = os.environ.get("OLLAMA_API_BASE", "http://localhost:11434")
API_TIMEOUT = int(os.environ.get("OLLAMA_API_TIMEOUT", "1200"))
PULL_TIMEOUT = int(os.environ.get("OLLAMA_PULL_TIMEOUT", "10800"))

# Registry backend: "api" talks HTTP to the server, "cli" drives the ollama binary
BACKENDS = ("api", "cli")
DEFAULT_BACKEND = os.environ.get("OLLAMA_CTX_BACKEND", "api")
OLLAMA_BIN = os.environ.get("OLLAMA_BIN", "ollama")

# Parameter written to the model definition
NUM_CTX_PARAMETER = "num_ctx"

def load_api_base_from_config(config_path):
    """Load the Ollama API base URL from a config file (JSON or simple text)."""
    if not os.path.isfile(config_path):
        return None
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            # Try JSON first
            try:
                data = json.load(f)
                if isinstance(data, dict):
                    return data.get('api_base')
                return None
            except json.JSONDecodeError:
                f.seek(0)
                # Fallback: treat as plain text (single line with URL)
                line = f.readline().strip()
                if line:
                    return line
    except (OSError, ValueError):
        pass
    return None

def resolve_api_base(api=None, host_config=None):
    """
    Determine the API base URL from command-line options and config files.

    Priority:
    1. Explicit --api URL
    2. Explicit --host-config file
    3. Default host config file in the current directory
    4. DEFAULT_API_BASE

    Args:
        api (str, optional): URL given on the command line
        host_config (str, optional): Path to a host config file

    Returns:
        str: The API base URL to use
    """
    if api:
        return api
    if host_config:
        return load_api_base_from_config(host_config) or DEFAULT_API_BASE
    if os.path.isfile(DEFAULT_HOST_CONFIG_FILE):
        return load_api_base_from_config(DEFAULT_HOST_CONFIG_FILE) or DEFAULT_API_BASE
    return DEFAULT_API_BASE
