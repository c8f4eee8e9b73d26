"""
Context window commands for the ollama-ctx CLI.
"""
import argparse
import logging
from ollama_ctx.core.sizes import parse_size
from ollama_ctx.core.policy import NamingMode, RunOptions
from ollama_ctx.core.orchestrator import ContextUpdater
from ollama_ctx.errors import RegistryError, SizeParseError, UsageError

logger = logging.getLogger("ollama_ctx.context")

SET_EPILOG = """\
Modes:
  Batch Mode:   If model_name is omitted, all installed models are checked.
  Single Mode:  If model_name is provided, only that model is updated.

Sizes accept thousand separators ('.' and ',') and a k or m suffix,
e.g. 16384, 16.384, 16k or 1m.

Examples:
  ollama-ctx context set llama3.3:latest
  ollama-ctx context set -m 16k llama3.3:latest
  ollama-ctx context set -s 8192 -o llama3.3:8k llama3.3:latest
  ollama-ctx context set -a -m 128k
"""

def setup_parser(parser):
    """
    Set up the argument parser for the context command group.

    Args:
        parser: The argument parser to set up
    """
    subparsers = parser.add_subparsers(dest="subcommand", help="Context subcommands")

    # set command
    set_parser = subparsers.add_parser(
        "set", help="Set num_ctx for one or all models",
        epilog=SET_EPILOG, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    set_parser.add_argument("--yes", "-y", action="store_true",
                            help="Automatically confirm all changes without prompting")
    set_parser.add_argument("--force", "-f", action="store_true",
                            help="Force update even if a 'num_ctx' is already set")
    set_parser.add_argument("--max-ctx", "-m", default=None, metavar="SIZE",
                            help="Set a MAXIMUM context size to act as a cap")
    set_parser.add_argument("--set-ctx", "-s", default=None, metavar="SIZE",
                            help="Set a SPECIFIC context size, ignoring the model's native value")
    set_parser.add_argument("--auto-name", "-a", action="store_true",
                            help="Create a new model named <base>:<size>_num_ctx instead of overwriting")
    set_parser.add_argument("--output-name", "-o", default=None, metavar="NAME",
                            help="Create a new model with this name (single mode only)")
    set_parser.add_argument("model_name", nargs="?", default=None,
                            help="Process only this model (optional)")

def handle_command(args, registry):
    """
    Handle context commands.

    Args:
        args: Command arguments
        registry: Model registry client

    Returns:
        int: Exit code
    """
    if args.subcommand == "set":
        return cmd_set(args, registry)
    else:
        logger.error("No subcommand specified")
        return 1

def parse_size_option(value, flag):
    """Parse a size given to flag, raising UsageError when it is unusable."""
    if value is None:
        return None
    try:
        size = parse_size(value)
    except SizeParseError:
        raise UsageError(f"{flag} requires a valid numeric argument, got '{value}'.")
    if size <= 0:
        raise UsageError(f"{flag} must be greater than zero.")
    return size

def build_run_options(args):
    """
    Validate the set command's arguments and build RunOptions.

    Raises:
        UsageError: On malformed sizes or conflicting options
    """
    if args.max_ctx is not None and args.set_ctx is not None:
        raise UsageError("The --max-ctx (-m) and --set-ctx (-s) options are mutually exclusive.")
    if args.auto_name and args.output_name is not None:
        raise UsageError("The --auto-name (-a) and --output-name (-o) options are mutually exclusive.")
    if args.output_name is not None and not args.model_name:
        raise UsageError("--output-name (-o) requires a model name; it cannot be used in batch mode.")
    if args.output_name is not None and not args.output_name.strip():
        raise UsageError("--output-name (-o) requires a non-empty name.")

    naming = NamingMode.OVERWRITE
    if args.auto_name:
        naming = NamingMode.AUTO
    elif args.output_name is not None:
        naming = NamingMode.CUSTOM

    return RunOptions(
        confirm_all=bool(args.yes),
        force_update=bool(args.force),
        max_context=parse_size_option(args.max_ctx, "--max-ctx"),
        specific_context=parse_size_option(args.set_ctx, "--set-ctx"),
        target_model=args.model_name or None,
        naming=naming,
        output_name=args.output_name,
    )

def cmd_set(args, registry):
    """
    Implement the context set command.

    Args:
        args: Command arguments
        registry: Model registry client

    Returns:
        int: Exit code
    """
    try:
        options = build_run_options(args)
    except UsageError as e:
        logger.error(f"Error: {e}")
        return 1

    updater = ContextUpdater(registry, options)
    try:
        results = updater.run()
    except RegistryError as e:
        logger.error(f"Error: {e}")
        return 1

    # Batch runs are best effort; a single model's failure is the run's failure
    if options.target_model and any(r.failed for r in results):
        return 1
    return 0
