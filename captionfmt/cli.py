"""Command-Line Interface handler for captionfmt."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader
from .log_setup import setup_logging
from .extractor import TimedTextExtractor, load_player_response, select_caption_track
from .exporter import TranscriptExporter
from .subtitle_formatter import SUPPORTED_FORMATS, render
from .exceptions import CaptionFmtError, ConfigurationError

logger = logging.getLogger(__name__) # Get logger for this module

DEFAULT_CONFIG_PATH = "config.yaml"

class CLIHandler:
    """Parses arguments and orchestrates the captionfmt conversion."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="captionfmt",
            description="captionfmt: Convert YouTube timedtext captions to WebVTT, SRT, plain text or JSON.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        source = parser.add_mutually_exclusive_group(required=True)
        source.add_argument(
            "-i", "--input",
            help="Path to a timedtext XML caption file."
        )
        source.add_argument(
            "--player-response",
            help="Path to a saved player response JSON; prints the URL of the caption track to download."
        )
        parser.add_argument(
            "-o", "--output-dir",
            default=".",
            help="Directory to save the generated files."
        )
        parser.add_argument(
            "-f", "--format",
            dest="formats",
            action="append",
            type=str.lower,
            choices=SUPPORTED_FORMATS,
            help="Output format; repeat for several. Overrides 'output_formats' from the config file."
        )
        parser.add_argument(
            "-c", "--config",
            default=None,
            help=f"Path to the configuration YAML file. '{DEFAULT_CONFIG_PATH}' is used when present."
        )
        parser.add_argument(
            "--language",
            default=None,
            help="Preferred caption language code. Overrides 'preferred_language' from the config file."
        )
        parser.add_argument(
            "--keep-xml",
            action="store_true",
            help="Also copy the source XML into the output directory."
        )
        parser.add_argument(
            "--stdout",
            action="store_true",
            help="Print a single rendered format to stdout instead of writing files."
        )
        parser.add_argument(
            "--log-level",
            default="INFO",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        return parser

    def _load_config(self, config_path: Optional[str]) -> dict:
        config_loader = ConfigLoader()
        if config_path is None:
            if not os.path.isfile(DEFAULT_CONFIG_PATH):
                logger.info(f"No {DEFAULT_CONFIG_PATH} found; using built-in defaults.")
                return config_loader.default_config()
            config_path = DEFAULT_CONFIG_PATH
        return config_loader.load_config(config_path)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the conversion."""
        args = self.parser.parse_args(argv)
        if args.stdout and args.formats and len(args.formats) > 1:
            self.parser.error("--stdout accepts exactly one --format.")

        # Keep stdout clean for anything we print there
        console = sys.stderr if (args.stdout or args.player_response) else sys.stdout
        log_level = getattr(logging, args.log_level.upper(), logging.INFO)

        # Temporarily setup basic logging to catch config loading errors
        setup_logging(log_level=log_level, log_dir='logs', log_file='captionfmt_init.log', stream=console)

        # --- Load Configuration ---
        try:
            config = self._load_config(args.config)
        except ConfigurationError as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}")
            sys.exit(1)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {args.config}")
            sys.exit(1)

        # --- Re-configure Logging with settings from Config ---
        setup_logging(
            log_level=log_level,
            log_dir=config.get('log_dir', 'logs'),
            log_file=config.get('log_file', 'captionfmt.log'),
            stream=console
        )

        # --- Apply CLI Overrides ---
        if args.formats:
            logger.info(f"Overriding output_formats from config with CLI argument: {args.formats}")
            config['output_formats'] = args.formats
        if args.language:
            config['preferred_language'] = args.language
        if args.keep_xml:
            config['keep_source_xml'] = True

        try:
            if args.player_response:
                payload = load_player_response(args.player_response)
                track = select_caption_track(payload, config['preferred_language'])
                print(track.base_url)
                sys.exit(0)

            extractor = TimedTextExtractor(language=config.get('preferred_language'))

            if args.stdout:
                fmt = args.formats[0] if args.formats else config['output_formats'][0]
                transcript = extractor.extract(args.input)
                sys.stdout.write(render(transcript.cues, fmt))
                sys.exit(0)

            exporter = TranscriptExporter(config=config, extractor=extractor)
            written = exporter.export(args.input, args.output_dir)
            logger.info(f"captionfmt finished successfully; wrote {len(written)} file(s).")
            sys.exit(0)

        except FileNotFoundError as e:
            logger.error(str(e))
            sys.exit(1)
        except CaptionFmtError as e:
            # Catch errors originating from our application logic
            logger.error(f"A captionfmt error occurred: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(2) # Use a different exit code for unexpected crashes


def main() -> None:
    """Console script entry point."""
    CLIHandler().run()
