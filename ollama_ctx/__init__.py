"""
Ollama Context CLI - Tools for managing the context window of Ollama models.

This package provides a CLI for setting the ``num_ctx`` parameter of models
installed in an Ollama server, either one model at a time or in batch over
every installed model.

Commands:
    set   - Set num_ctx to the native, capped or an explicit context size
    pull  - Re-pull installed models to pick up upstream updates
"""

__version__ = "1.0.0"
__author__ = "Mark Ward"
__license__ = "MIT"
__url__ = "https://github.com/MarkWard0110/ollama-ctx"
