"""
Apply context policy to one or all installed Ollama models.
"""
import os
import sys
import logging
from enum import Enum
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Optional
from ollama_ctx.config import NUM_CTX_PARAMETER
from ollama_ctx.core.policy import (
    Rationale, ResolvedAction, RunOptions, resolve_action, should_skip_existing
)
from ollama_ctx.core.registry import ModelRegistry
from ollama_ctx.errors import RegistryError

logger = logging.getLogger("ollama_ctx.core.orchestrator")

class Confirmation(Enum):
    """Answer to the per-model confirmation prompt."""
    APPLY = "apply"
    DECLINE = "decline"
    APPLY_ALL = "apply_all"

class Outcome(Enum):
    """Terminal state of a single model."""
    SKIPPED_NO_METADATA = "skipped_no_metadata"
    SKIPPED_ALREADY_SET = "skipped_already_set"
    APPLIED = "applied"
    DECLINED = "declined"
    FAILED_FETCH = "failed_fetch"
    FAILED_APPLY = "failed_apply"

FAILED_OUTCOMES = (Outcome.FAILED_FETCH, Outcome.FAILED_APPLY)

@dataclass
class ModelResult:
    """What happened to one model during a run."""
    name: str
    outcome: Outcome
    action: Optional[ResolvedAction] = None
    error: Optional[str] = None

    @property
    def failed(self):
        return self.outcome in FAILED_OUTCOMES

def parse_confirmation(answer):
    """Map a prompt answer to a Confirmation; anything unrecognised declines."""
    answer = (answer or "").strip().lower()
    if answer in ("a", "all"):
        return Confirmation.APPLY_ALL
    if answer in ("y", "yes"):
        return Confirmation.APPLY
    return Confirmation.DECLINE

def read_key():
    """Read a single keystroke from the terminal without waiting for Enter."""
    if os.name == "nt":
        import msvcrt
        return msvcrt.getwch()

    import termios
    import tty
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        return sys.stdin.read(1)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)

def ask_confirmation(question):
    """
    Prompt the user with a [y/N/all] question.

    Reads one keystroke when attached to a terminal, otherwise a line.
    """
    prompt = f"{question} [y/N/all] "
    if not sys.stdin.isatty():
        try:
            answer = input(prompt)
        except EOFError:
            # No more answers on stdin
            sys.stdout.write("\n")
            return Confirmation.DECLINE
        return parse_confirmation(answer)
    sys.stdout.write(prompt)
    sys.stdout.flush()
    key = read_key()
    sys.stdout.write("\n")
    if key == "\x03":
        raise KeyboardInterrupt
    return parse_confirmation(key)

class ContextUpdater:
    """
    Runs the set-context policy over a list of models.

    Models are processed one at a time in registry order. A failure on one
    model is recorded and the run moves on to the next.
    """

    def __init__(self, registry: ModelRegistry, options: RunOptions,
                 confirm: Optional[Callable[[str], Confirmation]] = None):
        self.registry = registry
        self.options = options
        self.confirm = confirm or ask_confirmation
        # Latched to True when the user answers "all"
        self.confirm_all = options.confirm_all

    def model_names(self) -> List[str]:
        """
        Models to process: the target model, or every installed model.

        Raises:
            RegistryError: If the listing fails or no models are installed
        """
        if self.options.target_model:
            return [self.options.target_model]
        names = self.registry.list_model_names()
        if not names:
            raise RegistryError("No Ollama models found.")
        return names

    def run(self) -> List[ModelResult]:
        if self.options.target_model:
            logger.info("--- Single Model Mode ---")
        else:
            logger.info("--- Batch Mode: Checking all installed models ---")

        names = self.model_names()
        results = []
        for name in names:
            logger.info("----------------------------------------")
            results.append(self.process_model(name))

        logger.info("----------------------------------------")
        log_summary(results)
        return results

    def process_model(self, model_name) -> ModelResult:
        logger.info(f"Processing model: {model_name}")

        try:
            descriptor = self.registry.get_metadata(model_name)
        except RegistryError as e:
            logger.error(f"Error: {e}")
            return ModelResult(model_name, Outcome.FAILED_FETCH, error=str(e))

        existing = descriptor.configured_context_length
        if should_skip_existing(descriptor, self.options):
            logger.info(f"Model already has '{NUM_CTX_PARAMETER}' set to {existing}. Skipping (use -f to override).")
            return ModelResult(model_name, Outcome.SKIPPED_ALREADY_SET)
        if existing is not None and self.options.force_update:
            logger.warning(f"Model has '{NUM_CTX_PARAMETER}' set to {existing}. --force is active, proceeding to overwrite.")

        native = descriptor.native_context_length
        if native is None or native <= 0:
            logger.info(f"Could not determine a valid 'context length' for {model_name}. Skipping.")
            return ModelResult(model_name, Outcome.SKIPPED_NO_METADATA)

        logger.info(f"Discovered model's native context length: {native}")
        action = resolve_action(descriptor, self.options)
        if action.rationale == Rationale.CAP_AT_MAX:
            logger.warning(action.describe())
        else:
            logger.info(action.describe())

        if not self.confirm_all:
            answer = self.confirm(self.question(model_name, action))
            if answer == Confirmation.APPLY_ALL:
                logger.info("Confirming for this and all subsequent models.")
                self.confirm_all = True
            elif answer != Confirmation.APPLY:
                logger.info(f"Skipping update for {model_name}.")
                return ModelResult(model_name, Outcome.DECLINED, action=action)

        return self.apply(model_name, action)

    @staticmethod
    def question(model_name, action):
        if action.destination == model_name:
            return f"Update {model_name} to use context size {action.final_context}?"
        return f"Create {action.destination} from {model_name} with context size {action.final_context}?"

    def apply(self, model_name, action: ResolvedAction) -> ModelResult:
        """Create the destination model, then display its parameters."""
        logger.info(f"Applying context size {action.final_context} to '{action.destination}'...")
        try:
            self.registry.create(action.destination, model_name, {NUM_CTX_PARAMETER: action.final_context})
        except RegistryError as e:
            logger.error(f"An error occurred while updating '{action.destination}': {e}")
            return ModelResult(model_name, Outcome.FAILED_APPLY, action=action, error=str(e))

        logger.info(f"Successfully updated '{action.destination}'.")
        self.verify(action.destination)
        return ModelResult(model_name, Outcome.APPLIED, action=action)

    def verify(self, model_name):
        """Log the model's parameter block. Failures here are only warnings."""
        try:
            parameters = self.registry.show_parameters(model_name)
        except RegistryError as e:
            logger.warning(f"Could not verify parameters of '{model_name}': {e}")
            return
        logger.info("Verifying new parameters:")
        for line in (parameters or "").splitlines():
            logger.info(f"    {line.strip()}")

def log_summary(results: List[ModelResult]):
    """Log how many models ended in each outcome."""
    counts = Counter(result.outcome for result in results)
    logger.info("--- Operation Complete ---")
    for outcome in Outcome:
        if counts[outcome]:
            logger.info(f"{outcome.value}: {counts[outcome]}")
    for result in results:
        if result.failed:
            logger.info(f"  failed: {result.name} ({result.error})")
