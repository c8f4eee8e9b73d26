"""
Context policy resolution: decides which num_ctx a model gets and under which name.
"""
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple
from ollama_ctx.core.sizes import format_size_tag

logger = logging.getLogger("ollama_ctx.core.policy")

AUTO_NAME_SUFFIX = "_num_ctx"

class NamingMode(Enum):
    """How the destination model is named."""
    OVERWRITE = "overwrite"
    AUTO = "auto"
    CUSTOM = "custom"

class Rationale(Enum):
    """Why a context value was chosen."""
    USE_NATIVE = "use_native"
    CAP_AT_MAX = "cap_at_max"
    SET_SPECIFIC = "set_specific"

@dataclass(frozen=True)
class ModelDescriptor:
    """Snapshot of a model's metadata as reported by the registry."""
    name: str
    native_context_length: Optional[int] = None
    configured_context_length: Optional[int] = None

@dataclass(frozen=True)
class RunOptions:
    """Options for one run of the set command. Never mutated after parsing."""
    confirm_all: bool = False
    force_update: bool = False
    max_context: Optional[int] = None
    specific_context: Optional[int] = None
    target_model: Optional[str] = None
    naming: NamingMode = NamingMode.OVERWRITE
    output_name: Optional[str] = None

@dataclass(frozen=True)
class ResolvedAction:
    """The change to apply to a single model."""
    final_context: int
    destination: str
    rationale: Rationale

    def describe(self):
        """Human-readable explanation of the chosen context value."""
        if self.rationale == Rationale.SET_SPECIFIC:
            return f"Setting specific context size to {self.final_context} as requested by --set-ctx."
        if self.rationale == Rationale.CAP_AT_MAX:
            return f"Capping at {self.final_context} as requested by --max-ctx."
        return f"Using native context length of {self.final_context}."

def should_skip_existing(descriptor: ModelDescriptor, options: RunOptions) -> bool:
    """
    Check whether a model already carrying num_ctx must be left alone.

    Only overwriting needs this guard; auto and custom naming create a new
    model and leave the source untouched.
    """
    if options.naming != NamingMode.OVERWRITE:
        return False
    if descriptor.configured_context_length is None:
        return False
    return not options.force_update

def resolve_context(native: int, options: RunOptions) -> Tuple[int, Rationale]:
    """
    Pick the context value for a model.

    Priority (first match wins):
    1. An explicit --set-ctx value, even when smaller than the native size
    2. The --max-ctx cap, when the native size is strictly larger
    3. The native size

    Args:
        native: The model's native context length
        options: Run options

    Returns:
        tuple: (final_context, rationale)
    """
    if options.specific_context is not None:
        return options.specific_context, Rationale.SET_SPECIFIC
    if options.max_context is not None and native > options.max_context:
        return options.max_context, Rationale.CAP_AT_MAX
    return native, Rationale.USE_NATIVE

def destination_name(source_name: str, final_context: int, options: RunOptions) -> str:
    """
    Name of the model that receives the new context value.

    Auto naming drops the source tag and appends a size tag, so
    "llama3.3:latest" at 131072 becomes "llama3.3:128k_num_ctx".
    """
    if options.naming == NamingMode.CUSTOM:
        return options.output_name
    if options.naming == NamingMode.AUTO:
        base = source_name.split(":", 1)[0]
        return f"{base}:{format_size_tag(final_context)}{AUTO_NAME_SUFFIX}"
    return source_name

def resolve_action(descriptor: ModelDescriptor, options: RunOptions) -> ResolvedAction:
    """
    Resolve the full action for a model with a known native context length.

    Raises:
        ValueError: If the descriptor has no usable native context length
    """
    native = descriptor.native_context_length
    if native is None or native <= 0:
        raise ValueError(f"No native context length known for {descriptor.name}")

    final_context, rationale = resolve_context(native, options)
    destination = destination_name(descriptor.name, final_context, options)
    logger.debug(f"Resolved {descriptor.name}: {rationale.value} -> {final_context} as {destination}")
    return ResolvedAction(final_context=final_context, destination=destination, rationale=rationale)
