"""Script engine interface used to turn source text into compiled functions."""

import importlib
import logging
from typing import Callable, Protocol

from qjsdis.qjsdis_error import QJSDisConfigError
from qjsdis.qjsdis_function import CompiledFunction
from qjsdis.qjsdis_image import ImageLoader


IMAGE_ENGINE = "image"


class ScriptEngine(Protocol):
    """Interface for compiling script source without running it."""

    def compile(self, source: str, label: str) -> CompiledFunction:
        """
        Compile source text to a compiled function.

        The script must not be executed.

        Args:
            source: Source text to compile
            label: Name identifying the source in diagnostics (usually the file name)

        Returns:
            Top-level compiled function

        Raises:
            QJSDisCompileError: If the engine rejects the source, with the engine's diagnostic
        """
        ...


class ImageScriptEngine:
    """
    Engine that reads compiled function images instead of compiling script source.

    The "source" handed to this engine is the YAML image a host-side dumper
    wrote for a compiled script.
    """

    def __init__(self) -> None:
        self._logger = logging.getLogger("ImageScriptEngine")

    def compile(self, source: str, label: str) -> CompiledFunction:
        """Parse a YAML compiled function image."""
        function = ImageLoader(label).load(source)
        self._logger.debug("Loaded image %s: %r", label, function)
        return function


def load_engine(spec: str) -> ScriptEngine:
    """
    Create the script engine named by a configuration value.

    Args:
        spec: "image" for the built-in image engine, or "package.module:factory"
            where factory() returns a ScriptEngine

    Returns:
        The script engine

    Raises:
        QJSDisConfigError: If the engine can't be found or created
    """
    if spec == IMAGE_ENGINE:
        return ImageScriptEngine()

    module_name, sep, attr_name = spec.partition(":")
    if not sep or not module_name or not attr_name:
        raise QJSDisConfigError(
            f"Invalid engine '{spec}'",
            context=f"Use '{IMAGE_ENGINE}' or 'package.module:factory'"
        )

    try:
        module = importlib.import_module(module_name)

    except ImportError as e:
        raise QJSDisConfigError(f"Cannot import engine module '{module_name}'", context=str(e)) from e

    factory: Callable[[], ScriptEngine] | None = getattr(module, attr_name, None)
    if factory is None or not callable(factory):
        raise QJSDisConfigError(f"Engine module '{module_name}' has no callable '{attr_name}'")

    try:
        engine = factory()

    except Exception as e:
        raise QJSDisConfigError(f"Engine factory '{spec}' failed", context=str(e)) from e

    if not callable(getattr(engine, 'compile', None)):
        raise QJSDisConfigError(f"Engine '{spec}' has no compile() method")

    return engine
