"""
Model management commands for the ollama-ctx CLI.
"""
import logging
from ollama_ctx.core.updater import pull_models
from ollama_ctx.errors import RegistryError

logger = logging.getLogger("ollama_ctx.model")

def setup_parser(parser):
    """
    Set up the argument parser for the model command group.

    Args:
        parser: The argument parser to set up
    """
    subparsers = parser.add_subparsers(dest="subcommand", help="Model subcommands")

    pull_parser = subparsers.add_parser("pull", help="Pull the latest version of installed models")
    pull_parser.add_argument("model_name", nargs="?", default=None,
                             help="Pull only this model (optional)")

def handle_command(args, registry):
    """
    Handle model commands.

    Args:
        args: Command arguments
        registry: Model registry client

    Returns:
        int: Exit code
    """
    if args.subcommand == "pull":
        return cmd_pull(args, registry)
    else:
        logger.error("No subcommand specified")
        return 1

def cmd_pull(args, registry):
    """
    Implement the model pull command.

    Args:
        args: Command arguments
        registry: Model registry client

    Returns:
        int: Exit code
    """
    try:
        success, pulled, failed = pull_models(registry, args.model_name)
    except RegistryError as e:
        logger.error(f"Error: {e}")
        return 1

    if not success:
        logger.warning("Some models could not be pulled")
    return 0 if success else 1
