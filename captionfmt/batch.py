"""
Batch conversion of every timedtext XML file in a directory.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Optional, Tuple

# Progress bar library
from tqdm import tqdm

from .config_loader import ConfigLoader
from .log_setup import setup_logging
from .extractor import TimedTextExtractor
from .exporter import TranscriptExporter
from .subtitle_formatter import SUPPORTED_FORMATS
from .exceptions import CaptionFmtError, ConfigurationError

logger = logging.getLogger(__name__)

def find_caption_files(input_dir: str) -> List[str]:
    """
    Finds all .xml files in the input directory, sorted by name.

    Args:
        input_dir: The directory to search for caption files.

    Returns:
        A sorted list of file paths.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    logger.info(f"Scanning directory for XML caption files: {input_dir}")
    files = [
        os.path.join(input_dir, filename)
        for filename in sorted(os.listdir(input_dir))
        # Case-insensitive check for .xml extension
        if filename.lower().endswith(".xml") and os.path.isfile(os.path.join(input_dir, filename))
    ]
    logger.info(f"Found {len(files)} XML files.")
    return files


def export_all(exporter: TranscriptExporter, paths: List[str], output_dir: str) -> Tuple[int, int]:
    """
    Exports each caption file, continuing past per-file failures.

    Returns:
        (files_processed, files_failed)
    """
    files_processed = 0
    files_failed = 0
    with tqdm(total=len(paths), unit="file", desc="Starting Batch") as pbar:
        for path in paths:
            filename = os.path.basename(path)
            pbar.set_description(f"Processing: {filename[:30]}")
            try:
                exporter.export(path, output_dir)
                files_processed += 1
            except (CaptionFmtError, FileNotFoundError) as e:
                logger.error(f"captionfmt failed for '{filename}': {e}")
                files_failed += 1
            finally:
                pbar.update(1) # Increment progress bar regardless of success/failure
    return files_processed, files_failed


def run_batch_processing(argv: Optional[List[str]] = None) -> None:
    """Parses arguments, sets up, and runs the batch conversion."""
    parser = argparse.ArgumentParser(
        prog="captionfmt-batch",
        description="captionfmt Batch: Convert every timedtext XML file in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing the timedtext XML files."
    )
    parser.add_argument(
        "-o", "--output-dir",
        default=None,
        help="Directory for the exports. Defaults to an 'Exports' folder inside the input directory."
    )
    parser.add_argument(
        "-f", "--format",
        dest="formats",
        action="append",
        type=str.lower,
        choices=SUPPORTED_FORMATS,
        help="Output format; repeat for several. Overrides the config file."
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to the configuration YAML file. Built-in defaults are used when omitted."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )

    args = parser.parse_args(argv)

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir='logs', log_file='captionfmt_batch_init.log')

    # --- Load Configuration ---
    config_loader = ConfigLoader()
    try:
        config = config_loader.load_config(args.config) if args.config else config_loader.default_config()
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}")
        sys.exit(1)

    setup_logging(
        log_level=log_level,
        log_dir=config.get('log_dir', 'logs'),
        log_file=config.get('log_file', 'captionfmt_batch.log')
    )

    if args.formats:
        logger.info(f"Overriding output_formats from config with CLI argument: {args.formats}")
        config['output_formats'] = args.formats

    try:
        paths = find_caption_files(args.input_dir)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)
    if not paths:
        logger.warning(f"No .xml files found in {args.input_dir}. Exiting.")
        sys.exit(0)

    output_dir = args.output_dir or os.path.join(args.input_dir, "Exports")
    try:
        exporter = TranscriptExporter(
            config=config,
            extractor=TimedTextExtractor(language=config.get('preferred_language'))
        )
    except CaptionFmtError as e:
        logger.critical(f"Failed to initialize exporter: {e}")
        sys.exit(1)

    batch_start_time = time.time()
    logger.info(f"--- Starting Batch Conversion for {len(paths)} files ---")
    try:
        files_processed, files_failed = export_all(exporter, paths, output_dir)
    except KeyboardInterrupt:
        logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
        sys.exit(1)

    logger.info("--- Batch Conversion Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{len(paths)} files")
    logger.info(f"Failed: {files_failed}/{len(paths)} files")

    sys.exit(1 if files_failed > 0 else 0) # Indicate partial failure with exit code
