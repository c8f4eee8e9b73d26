"""
Model registry clients for an Ollama server.

Two backends are provided: ``ApiModelRegistry`` talks to the Ollama HTTP API,
``CliModelRegistry`` drives the ``ollama`` executable and scrapes its text
output. Both return ``ModelDescriptor`` snapshots so the rest of the package
never depends on either wire format.
"""
import os
import logging
import subprocess
import tempfile
import requests
from ollama_ctx.config import (
    DEFAULT_API_BASE, API_TIMEOUT, PULL_TIMEOUT, OLLAMA_BIN, NUM_CTX_PARAMETER
)
from ollama_ctx.core.policy import ModelDescriptor
from ollama_ctx.errors import RegistryError, ModelNotFoundError, ApplyError

logger = logging.getLogger("ollama_ctx.core.registry")

def parse_int(value):
    """Return value as a non-negative int, or None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    text = str(value).strip() if value is not None else ""
    if text and all(c in "0123456789" for c in text):
        return int(text)
    return None

def find_parameter(parameters_text, key):
    """
    Find a parameter value in an Ollama parameter block.

    Args:
        parameters_text (str): Lines of "<key> <value>" pairs
        key (str): Parameter name, e.g. "num_ctx"

    Returns:
        str: The raw value of the last matching line, or None
    """
    found = None
    for line in (parameters_text or "").splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == key:
            found = parts[-1]
    return found

def build_modelfile(base_model, parameters):
    """Render a Modelfile deriving from base_model with the given parameters."""
    lines = [f"FROM {base_model}"]
    for key, value in parameters.items():
        lines.append(f"PARAMETER {key} {value}")
    return "\n".join(lines) + "\n"

class ModelRegistry:
    """Operations the context updater needs from an Ollama server."""

    def list_model_names(self):
        """Return the names of all installed models."""
        raise NotImplementedError

    def get_metadata(self, model_name):
        """Return a ModelDescriptor, raising ModelNotFoundError when absent."""
        raise NotImplementedError

    def create(self, destination, base_model, parameters):
        """Create or overwrite destination from base_model, raising ApplyError on failure."""
        raise NotImplementedError

    def show_parameters(self, model_name):
        """Return the model's parameter block as display text."""
        raise NotImplementedError

    def pull(self, model_name):
        """Pull the latest version of a model."""
        raise NotImplementedError

class ApiModelRegistry(ModelRegistry):
    """
    Registry backed by the Ollama HTTP API.
    """

    def __init__(self, api_base=DEFAULT_API_BASE, timeout=API_TIMEOUT, pull_timeout=PULL_TIMEOUT):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.pull_timeout = pull_timeout

    def _request(self, method, path, payload=None, timeout=None):
        url = f"{self.api_base}{path}"
        try:
            resp = requests.request(method, url, json=payload, timeout=timeout or self.timeout)
        except requests.ConnectionError:
            raise RegistryError(f"Could not connect to Ollama API at {self.api_base}. Is Ollama running?")
        except requests.RequestException as e:
            raise RegistryError(f"Error calling {url}: {e}")
        return resp

    def _json(self, resp, path):
        url = f"{self.api_base}{path}"
        try:
            data = resp.json()
        except ValueError as e:
            raise RegistryError(f"Invalid response from {url}: {e}")
        if not isinstance(data, dict):
            raise RegistryError(f"Invalid response from {url}: expected a JSON object")
        return data

    @staticmethod
    def _error_detail(resp):
        try:
            return resp.json().get("error") or resp.text
        except (ValueError, AttributeError):
            return resp.text

    def list_model_names(self):
        resp = self._request("GET", "/api/tags")
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise RegistryError(f"Error fetching models from {self.api_base}: {e}")
        models = self._json(resp, "/api/tags").get("models") or []
        return [m.get("name") or m.get("model") for m in models if m.get("name") or m.get("model")]

    def _show(self, model_name):
        resp = self._request("POST", "/api/show", {"model": model_name})
        if resp.status_code == 404:
            raise ModelNotFoundError(model_name)
        try:
            resp.raise_for_status()
        except requests.HTTPError:
            raise RegistryError(f"Could not get information for '{model_name}': {self._error_detail(resp)}")
        return self._json(resp, "/api/show")

    def get_metadata(self, model_name):
        data = self._show(model_name)

        native = None
        for key, value in (data.get("model_info") or {}).items():
            if key.endswith(".context_length"):
                native = parse_int(value)
                break
        if native is None:
            logger.debug(f"No context_length property found for {model_name}")

        configured = parse_int(find_parameter(data.get("parameters"), NUM_CTX_PARAMETER))
        return ModelDescriptor(
            name=model_name,
            native_context_length=native,
            configured_context_length=configured,
        )

    def create(self, destination, base_model, parameters):
        payload = {
            "model": destination,
            "from": base_model,
            "parameters": dict(parameters),
            "stream": False,
        }
        logger.debug(f"Creating {destination} from {base_model} with {parameters}")
        try:
            resp = self._request("POST", "/api/create", payload)
        except RegistryError as e:
            raise ApplyError(destination, str(e))
        if not resp.ok:
            raise ApplyError(destination, self._error_detail(resp))

    def show_parameters(self, model_name):
        return self._show(model_name).get("parameters", "")

    def pull(self, model_name):
        resp = self._request("POST", "/api/pull", {"model": model_name, "stream": False},
                             timeout=self.pull_timeout)
        if resp.status_code == 404:
            raise ModelNotFoundError(model_name)
        if not resp.ok:
            raise RegistryError(f"Error pulling {model_name}: {self._error_detail(resp)}")

class CliModelRegistry(ModelRegistry):
    """
    Registry backed by the ``ollama`` executable.

    Model definitions are handed to ``ollama create`` through a temporary
    Modelfile that only lives for the duration of one create call.
    """

    def __init__(self, executable=OLLAMA_BIN, pull_timeout=PULL_TIMEOUT):
        self.executable = executable
        self.pull_timeout = pull_timeout

    def _run(self, *args, timeout=None):
        cmd = [self.executable, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError:
            raise RegistryError(f"'{self.executable}' executable not found. Is Ollama installed?")
        except subprocess.TimeoutExpired:
            raise RegistryError(f"'{' '.join(cmd)}' timed out after {timeout} seconds")

    def list_model_names(self):
        result = self._run("list")
        if result.returncode != 0:
            raise RegistryError(f"'ollama list' failed: {result.stderr.strip()}")
        names = []
        # First line is the NAME/ID/SIZE/MODIFIED header
        for line in result.stdout.splitlines()[1:]:
            parts = line.split()
            if parts:
                names.append(parts[0])
        return names

    def _show(self, model_name):
        result = self._run("show", model_name)
        if result.returncode != 0:
            stderr = result.stderr.strip()
            if "not found" in stderr.lower():
                raise ModelNotFoundError(model_name)
            raise RegistryError(f"Could not get information for '{model_name}': {stderr}")
        return result.stdout

    @staticmethod
    def parse_section(show_output, heading):
        """
        Extract the indented lines under a heading of ``ollama show`` output.

        The section ends at the first blank line or at a line indented no
        deeper than the heading itself.
        """
        lines = []
        heading_indent = None
        for line in show_output.splitlines():
            indent = len(line) - len(line.lstrip())
            if heading_indent is None:
                if line.strip() == heading:
                    heading_indent = indent
                continue
            if not line.strip() or indent <= heading_indent:
                break
            lines.append(line.strip())
        return "\n".join(lines)

    @staticmethod
    def parse_native_context(show_output):
        """Return the 'context length' value of ``ollama show`` output, or None."""
        for line in show_output.splitlines():
            if "context length" in line:
                parts = line.split()
                return parse_int(parts[-1]) if parts else None
        return None

    def get_metadata(self, model_name):
        output = self._show(model_name)
        parameters = self.parse_section(output, "Parameters")
        return ModelDescriptor(
            name=model_name,
            native_context_length=self.parse_native_context(output),
            configured_context_length=parse_int(find_parameter(parameters, NUM_CTX_PARAMETER)),
        )

    def create(self, destination, base_model, parameters):
        modelfile = tempfile.NamedTemporaryFile(
            mode="w", suffix=".Modelfile", prefix="ollama_ctx_", delete=False, encoding="utf-8"
        )
        try:
            with modelfile:
                modelfile.write(build_modelfile(base_model, parameters))
            logger.debug(f"Wrote temporary Modelfile {modelfile.name}")
            try:
                result = self._run("create", destination, "-f", modelfile.name)
            except RegistryError as e:
                raise ApplyError(destination, str(e))
            if result.returncode != 0:
                raise ApplyError(destination, result.stderr.strip() or f"exit status {result.returncode}")
        finally:
            if os.path.exists(modelfile.name):
                os.remove(modelfile.name)
                logger.debug(f"Removed temporary Modelfile {modelfile.name}")

    def show_parameters(self, model_name):
        return self.parse_section(self._show(model_name), "Parameters")

    def pull(self, model_name):
        result = self._run("pull", model_name, timeout=self.pull_timeout)
        if result.returncode != 0:
            stderr = result.stderr.strip()
            if "not found" in stderr.lower() or "does not exist" in stderr.lower():
                raise ModelNotFoundError(model_name)
            raise RegistryError(f"Error pulling {model_name}: {stderr}")

def create_registry(backend="api", api_base=DEFAULT_API_BASE):
    """
    Build the registry client for the chosen backend.

    Args:
        backend (str): "api" or "cli"
        api_base (str): Ollama API base URL, used by the "api" backend

    Returns:
        ModelRegistry: The registry client
    """
    if backend == "api":
        return ApiModelRegistry(api_base)
    if backend == "cli":
        return CliModelRegistry()
    raise ValueError(f"Unknown registry backend: {backend}")
