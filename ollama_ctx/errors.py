"""
Exceptions raised by the Ollama Context CLI.
"""


class OllamaCtxError(Exception):
    """Base class for all errors raised by this package."""


class UsageError(OllamaCtxError):
    """Malformed or conflicting command-line options."""


class SizeParseError(OllamaCtxError, ValueError):
    """A size token such as ``8k`` could not be parsed."""


class RegistryError(OllamaCtxError):
    """The model registry could not complete a request."""


class ModelNotFoundError(RegistryError):
    """The requested model is not installed."""

    def __init__(self, model_name):
        super().__init__(f"Model '{model_name}' not found. Does the model exist?")
        self.model_name = model_name


class ApplyError(RegistryError):
    """Creating or overwriting a model definition failed."""

    def __init__(self, model_name, reason):
        super().__init__(f"Failed to create '{model_name}': {reason}")
        self.model_name = model_name
        self.reason = reason
