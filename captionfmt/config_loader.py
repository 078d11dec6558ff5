"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'output_formats': ['vtt', 'srt', 'text', 'json'],
    'preferred_language': 'en',
    'keep_source_xml': False,
    'log_dir': 'logs',
    'log_file': 'captionfmt.log',
}

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def default_config(self) -> dict:
        """Returns a fresh copy of the built-in defaults."""
        config = dict(DEFAULT_CONFIG)
        config['output_formats'] = list(DEFAULT_CONFIG['output_formats'])
        return config

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Keys missing from the file fall back to DEFAULT_CONFIG.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML,
                              holds invalid values, or cannot be read.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except (IOError, UnicodeDecodeError) as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None:
            # An empty file means "all defaults"
            loaded = {}
        if not isinstance(loaded, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        config = self.default_config()
        config.update(loaded)
        self._validate(config, config_path)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    def _validate(self, config: dict, config_path: str) -> None:
        formats = config['output_formats']
        if isinstance(formats, str):
            config['output_formats'] = [formats]
        elif not isinstance(formats, list) or not formats or not all(isinstance(f, str) for f in formats):
            raise ConfigurationError(f"'output_formats' in {config_path} must be a non-empty list of format names.")
        if not isinstance(config['preferred_language'], str) or not config['preferred_language'].strip():
            raise ConfigurationError(f"'preferred_language' in {config_path} must be a non-empty string.")
        if not isinstance(config['keep_source_xml'], bool):
            raise ConfigurationError(f"'keep_source_xml' in {config_path} must be true or false.")
