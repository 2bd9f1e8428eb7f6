"""
Configuration management for the disassembler.
"""

import logging
import os
from dataclasses import dataclass
from typing import List

import yaml

from qjsdis.qjsdis_disassembler import DEFAULT_MAX_DEPTH, INDENT_WIDTH
from qjsdis.qjsdis_engine import IMAGE_ENGINE
from qjsdis.qjsdis_error import QJSDisConfigError


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DisassemblerConfig:
    """Configuration for the disassembler command line tool."""

    engine: str = IMAGE_ENGINE
    indent_width: int = INDENT_WIDTH
    max_depth: int | None = DEFAULT_MAX_DEPTH
    log_level: str = "WARNING"
    log_file: str | None = None

    @classmethod
    def load_from_file(cls, config_path: str) -> 'DisassemblerConfig':
        """Load configuration from YAML file."""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f)

            except (yaml.YAMLError, UnicodeDecodeError) as e:
                raise QJSDisConfigError(f"Cannot parse configuration file {config_path}", context=str(e)) from e

        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise QJSDisConfigError(f"Configuration file {config_path} must contain a mapping")

        unknown = sorted(set(data) - {'engine', 'indent_width', 'max_depth', 'log_level', 'log_file'})
        if unknown:
            raise QJSDisConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        return cls(
            engine=data.get('engine', IMAGE_ENGINE),
            indent_width=data.get('indent_width', INDENT_WIDTH),
            max_depth=data.get('max_depth', DEFAULT_MAX_DEPTH),
            log_level=data.get('log_level', "WARNING"),
            log_file=data.get('log_file')
        )

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        data = {
            'engine': self.engine,
            'indent_width': self.indent_width,
            'max_depth': self.max_depth,
            'log_level': self.log_level,
            'log_file': self.log_file
        }

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=True)

    def get_log_level(self) -> int:
        """Return the configured log level as a logging module constant."""
        return getattr(logging, str(self.log_level).upper(), logging.WARNING)

    def validate(self) -> List[str]:
        """Validate the configuration and return any errors."""
        errors = []

        if not isinstance(self.engine, str) or not self.engine:
            errors.append("'engine' must be a non-empty string")

        if not isinstance(self.indent_width, int) or isinstance(self.indent_width, bool) or self.indent_width < 1:
            errors.append(f"'indent_width' must be an integer of at least 1, got {self.indent_width!r}")

        if self.max_depth is not None:
            if not isinstance(self.max_depth, int) or isinstance(self.max_depth, bool) or self.max_depth < 1:
                errors.append(f"'max_depth' must be a positive integer or null, got {self.max_depth!r}")

        if str(self.log_level).upper() not in LOG_LEVELS:
            errors.append(f"'log_level' must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

        if self.log_file is not None and not isinstance(self.log_file, str):
            errors.append("'log_file' must be a path string")

        return errors
