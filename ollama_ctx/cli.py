#!/usr/bin/env python3
"""
Main CLI entry point for the Ollama Context application.
"""
import argparse
import sys
import logging
from ollama_ctx import __version__
from ollama_ctx.commands import model, context
from ollama_ctx.config import BACKENDS, DEFAULT_API_BASE, DEFAULT_BACKEND, resolve_api_base

def setup_logging(verbose=False):
    """Configure logging for the application"""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )
    return logging.getLogger("ollama_ctx")

def build_parser():
    """Build the top-level argument parser with all command groups."""
    parser = argparse.ArgumentParser(
        prog="ollama-ctx",
        description="Tools for managing the context window of Ollama models.",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--host-config", type=str, default=None,
        help="Path to Ollama host configuration file (default: ollama_host.conf)"
    )
    parser.add_argument(
        "--api", type=str, default=None,
        help=f"Ollama API base URL (default: from host config file or {DEFAULT_API_BASE})"
    )
    parser.add_argument(
        "--backend", choices=BACKENDS, default=DEFAULT_BACKEND,
        help=f"Talk to Ollama through its HTTP API or the ollama executable (default: {DEFAULT_BACKEND})"
    )

    # Create subparsers for our command groups
    subparsers = parser.add_subparsers(dest="command_group", help="Command group")

    # Add context commands
    context_parser = subparsers.add_parser("context", help="Context size commands")
    context.setup_parser(context_parser)

    # Add model commands
    model_parser = subparsers.add_parser("model", help="Model management commands")
    model.setup_parser(model_parser)

    return parser

def main(argv=None):
    """Main entry point for the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = setup_logging(args.verbose)

    if args.command_group is None:
        parser.print_help()
        return 0

    # Check for mutually exclusive --api and --host-config
    if args.api and args.host_config:
        logger.error("--api and --host-config are mutually exclusive. Please specify only one.")
        return 1

    api_base = resolve_api_base(args.api, args.host_config)

    from ollama_ctx.core.registry import create_registry
    registry = create_registry(args.backend, api_base)
    logger.debug(f"Using {args.backend} backend (API base: {api_base})")

    # Dispatch to the appropriate command handler
    try:
        if args.command_group == "context":
            return context.handle_command(args, registry)
        elif args.command_group == "model":
            return model.handle_command(args, registry)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 1
    except Exception as e:
        logger.error(f"Error: {e}", exc_info=args.verbose)
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
