"""
Core functionality modules for the ollama-ctx package.
These modules hold the size parsing, context policy, registry clients and
the batch updater used by the command modules.
"""

from ollama_ctx.core.sizes import parse_size, format_size_tag
from ollama_ctx.core.policy import (
    ModelDescriptor, NamingMode, Rationale, ResolvedAction, RunOptions,
    resolve_action, resolve_context, destination_name, should_skip_existing
)
from ollama_ctx.core.registry import ApiModelRegistry, CliModelRegistry, create_registry
from ollama_ctx.core.orchestrator import ContextUpdater, Confirmation, Outcome, ModelResult
from ollama_ctx.core.updater import pull_models
