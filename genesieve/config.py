# File: genesieve/config.py
# Location: genesieve/genesieve/config.py

"""
Configuration management module.

This module handles loading run defaults from a JSON file. All default
values reside in config.json, which is included in the installed package
directory. Analysis declarations (the steps to run) are read by
``genesieve.analysis.parser``; values given there take precedence over the
defaults loaded here.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = os.path.join(os.path.dirname(__file__), "config.json")


def load_config(config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a JSON file.

    If no config_file is provided, the function loads the 'config.json' from
    the installed package directory.

    Parameters
    ----------
    config_file : str, optional
        Path to a configuration file in JSON format. If None, defaults to
        the package-installed 'config.json'.

    Returns
    -------
    dict
        Configuration dictionary loaded from the JSON file.

    Raises
    ------
    FileNotFoundError
        If the specified configuration file does not exist.
    ValueError
        If there is an error parsing the JSON configuration file.
    """
    if not config_file:
        config_file = DEFAULT_CONFIG_FILE

    if not os.path.exists(config_file):
        raise FileNotFoundError(f"Configuration file '{config_file}' not found.")

    with open(config_file, "r", encoding="utf-8") as f:
        try:
            config = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Error parsing JSON configuration: {e}")

    logger.debug(f"Loaded configuration from {config_file}")
    return config
