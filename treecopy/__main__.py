# treecopy/__main__.py

import sys
import logging

from treecopy.core.config_manager import ConfigManager
from treecopy.core.logger_setup import setup_logging
from treecopy.cli.argument_parser import parse_arguments
from treecopy.cli.application_factory import run_copy, run_move, validate_arguments


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)

    config_manager = ConfigManager(config_path=args.config)
    config = config_manager.load_config()

    setup_logging(
        log_level=getattr(logging, config.log_level),
        console_level=logging.WARNING,
        log_file_rotation=config.log_file_rotation,
        log_file_max_size=config.log_file_max_size
    )

    is_valid, error_message = validate_arguments(args)
    if not is_valid:
        print(f"Error: {error_message}", file=sys.stderr)
        return 1

    if args.command == "move":
        return run_move(args, config)
    return run_copy(args, config)


if __name__ == "__main__":
    sys.exit(main())
