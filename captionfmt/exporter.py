"""Orchestrates turning a caption payload into export files."""

import logging
import os
import tempfile
import time
from typing import Dict, List

from .extractor import CueExtractor
from .subtitle_formatter import get_formatter, normalize_format, render_all
from .models import Transcript
from .exceptions import CaptionFmtError, FileSystemError
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

class TranscriptExporter:
    """
    Manages the end-to-end conversion of one caption file into the
    configured export formats.
    """

    def __init__(self, config: dict, extractor: CueExtractor):
        """
        Initializes the TranscriptExporter.

        Args:
            config: A dictionary containing configuration settings.
            extractor: The CueExtractor that reads source files.

        Raises:
            UnsupportedFormatError: If a configured output format is unknown.
        """
        self.config = config
        self.extractor = extractor

        formats = config.get('output_formats') or ['srt']
        # Keep order, drop duplicates
        self.output_formats: List[str] = list(dict.fromkeys(normalize_format(fmt) for fmt in formats))
        self.keep_source_xml = bool(config.get('keep_source_xml', False))

    def _get_output_paths(self, source_path: str, output_dir: str) -> Dict[str, str]:
        """Determines output filenames based on the source path and formats."""
        base_name = os.path.splitext(os.path.basename(source_path))[0]
        return {
            fmt: os.path.join(output_dir, f"{base_name}.{get_formatter(fmt).extension}")
            for fmt in self.output_formats
        }

    def _write_file(self, path: str, data: bytes) -> None:
        """Writes to a temporary file beside path, then moves it into place."""
        fd, temp_path = tempfile.mkstemp(dir=os.path.dirname(path) or '.', prefix='.captionfmt-', suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(temp_path, path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}", exc_info=True)
            self._remove_quietly(temp_path)
            raise FileSystemError(f"Could not write output file {path}: {e}") from e

    def _remove_quietly(self, *file_paths: str) -> None:
        """Removes files left over from a failed export."""
        for file_path in file_paths:
            if file_path and os.path.exists(file_path):
                try:
                    os.remove(file_path)
                    logger.info(f"Removed partial output: {file_path}")
                except OSError as e:
                    logger.warning(f"Could not remove partial output {file_path}: {e}")

    def _encode(self, rendered: Dict[str, str]) -> Dict[str, bytes]:
        encoded = {}
        for fmt, content in rendered.items():
            try:
                encoded[fmt] = content.encode('utf-8')
            except UnicodeEncodeError as e:
                raise FileSystemError(f"{fmt.upper()} output cannot be written as UTF-8: {e}") from e
        return encoded

    def convert(self, transcript: Transcript) -> Dict[str, str]:
        """Renders a transcript in every configured format without touching disk."""
        return render_all(transcript.cues, self.output_formats)

    def export(self, source_path: str, output_dir: str) -> List[str]:
        """
        Converts a single caption file into every configured format.

        Every format is rendered and encoded before anything is written, each
        file is moved into place from a temporary file, and files already
        written by this call are removed again if a later one fails. A failed
        export therefore leaves no output from that call behind.

        Args:
            source_path: Path to the caption payload.
            output_dir: Directory to save the export files.

        Returns:
            Paths of the files written, in format order.

        Raises:
            CaptionFmtError: For extraction, validation or writing errors.
            FileNotFoundError: If the source file is not found.
        """
        start_time = time.time()
        logger.info(f"--- Exporting captions from: {source_path} ---")
        written = []

        try:
            transcript = self.extractor.extract(source_path)
            logger.info(f"Extracted {len(transcript.cues)} cues.")

            encoded = self._encode(self.convert(transcript))
            output_paths = self._get_output_paths(source_path, output_dir)

            if self.keep_source_xml:
                xml_path = os.path.join(output_dir, os.path.basename(source_path))
                if os.path.abspath(xml_path) != os.path.abspath(source_path):
                    try:
                        with open(source_path, 'rb') as f:
                            encoded['xml'] = f.read()
                    except OSError as e:
                        raise FileSystemError(f"Could not read source XML {source_path}: {e}") from e
                    output_paths['xml'] = xml_path

            ensure_dir_exists(output_dir)
            for fmt, data in encoded.items():
                path = output_paths[fmt]
                self._write_file(path, data)
                written.append(path)
                logger.info(f"{fmt.upper()} saved to: {path}")

            logger.info(f"--- Export completed in {time.time() - start_time:.2f} seconds ---")
            return written

        except (CaptionFmtError, FileNotFoundError) as e:
            logger.error(f"Export failed for {source_path}: {e}", exc_info=False)
            self._remove_quietly(*written)
            raise
        except Exception as e:
            logger.critical(f"An unexpected error occurred while exporting {source_path}: {e}", exc_info=True)
            self._remove_quietly(*written)
            raise CaptionFmtError(f"An unexpected error occurred: {e}") from e
