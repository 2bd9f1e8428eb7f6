"""
Compiled function images.

An image is a YAML document describing a compiled function tree, as dumped by
a host engine.  The top-level mapping has:

    byte_code: hex string ("0c 00 28", "0x0c 0x00", ...) or list of byte values
    cpool:     constant pool list; mappings with a byte_code key are nested functions
    source:    optional source text
    line_num:  optional starting line number (default 1)
    name:      optional function name
    filename:  optional source file name (defaults to the image label)
"""

from typing import Any, List

import yaml

from qjsdis.qjsdis_error import QJSDisCompileError
from qjsdis.qjsdis_function import CompiledFunction


class ImageLoader:
    """Builds CompiledFunction trees from YAML images."""

    def __init__(self, label: str = "<image>") -> None:
        """
        Initialize loader.

        Args:
            label: Name of the image used as prefix in diagnostics
        """
        self.label = label

    def load(self, text: str) -> CompiledFunction:
        """
        Parse an image.

        Args:
            text: YAML image text

        Returns:
            The top-level compiled function

        Raises:
            QJSDisCompileError: If the text is not valid YAML or doesn't describe a function
        """
        try:
            data = yaml.safe_load(text)

        except yaml.MarkedYAMLError as e:
            location = self.label
            if e.problem_mark is not None:
                location = f"{self.label}:{e.problem_mark.line + 1}:{e.problem_mark.column + 1}"

            raise QJSDisCompileError(f"{location}: {e.problem or e}") from e

        except yaml.YAMLError as e:
            raise QJSDisCompileError(f"{self.label}: {e}") from e

        if not isinstance(data, dict):
            raise QJSDisCompileError(f"{self.label}: image must be a mapping, got {type(data).__name__}")

        return self._build_function(data, "function")

    def _build_function(self, data: dict, path: str) -> CompiledFunction:
        """Build one compiled function (and its nested functions) from an image mapping."""
        if 'byte_code' not in data:
            raise self._error(path, "missing 'byte_code'")

        byte_code = self._parse_byte_code(data['byte_code'], f"{path}.byte_code")

        cpool_data = data.get('cpool', [])
        if cpool_data is None:
            cpool_data = []

        if not isinstance(cpool_data, list):
            raise self._error(f"{path}.cpool", "must be a list")

        cpool: List[Any] = []
        for i, value in enumerate(cpool_data):
            if isinstance(value, dict) and 'byte_code' in value:
                cpool.append(self._build_function(value, f"{path}.cpool[{i}]"))
                continue

            cpool.append(value)

        source = data.get('source')
        if source is not None and not isinstance(source, str):
            raise self._error(f"{path}.source", "must be a string")

        line_num = data.get('line_num', 1)
        if not isinstance(line_num, int) or isinstance(line_num, bool):
            raise self._error(f"{path}.line_num", "must be an integer")

        return CompiledFunction(
            byte_code=byte_code,
            cpool=cpool,
            source=source,
            line_num=line_num,
            name=str(data.get('name', "<eval>")),
            filename=str(data.get('filename', self.label))
        )

    def _parse_byte_code(self, value: Any, path: str) -> bytes:
        """Convert a hex string or a list of integers to bytes."""
        if isinstance(value, str):
            digits = "".join(token[2:] if token.lower().startswith("0x") else token for token in value.split())
            try:
                return bytes.fromhex(digits)

            except ValueError as e:
                raise self._error(path, f"invalid hex: {e}") from e

        if isinstance(value, list):
            if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value):
                raise self._error(path, "list entries must be integers from 0 to 255")

            return bytes(value)

        raise self._error(path, "must be a hex string or a list of bytes")

    def _error(self, path: str, message: str) -> QJSDisCompileError:
        return QJSDisCompileError(f"{self.label}: {path}: {message}")


def load_image(text: str, label: str = "<image>") -> CompiledFunction:
    """Convenience function to parse a YAML compiled function image."""
    return ImageLoader(label).load(text)
