#!/usr/bin/env python3
"""Plugin registry.

Maps plugin names, as given on the command line or in minifyimg.json, to
factories producing transform callables. The engine itself only ever sees
the resulting list of callables.

Example:
    >>> registry = get_default_registry()
    >>> plugins = registry.resolve(["pngquant", "jpegtran", "webp"])
"""

from functools import partial
from importlib.metadata import entry_points
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from minifyimg.core.constants import ErrorCode, TransformCallable
from minifyimg.core.logging import get_logger

PluginFactory = Callable[..., TransformCallable]

ENTRY_POINT_GROUP = "minifyimg.plugins"


class PluginError(Exception):
    """A plugin could not be found or created."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.DEPENDENCY_ERROR):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


def unknown_plugin_message(name: str) -> str:
    return (
        f"Unknown plugin: {name}\n"
        "Did you forget to install the plugin?\n"
        "You can install it with:\n"
        f"  $ pip install minifyimg-{name}"
    )


class PluginRegistry:
    """Registry of plugin factories by name."""

    def __init__(self) -> None:
        self._factories: Dict[str, PluginFactory] = {}

    def register(self, name: str, factory: PluginFactory) -> None:
        """Register a factory under name.

        Raises:
            PluginError: If name is empty or factory is not callable
        """
        name = (name or "").strip()
        if not name:
            raise PluginError("Plugin must have a non-empty name", ErrorCode.INVALID_INPUT)
        if not callable(factory):
            raise PluginError(f"Factory for plugin '{name}' is not callable", ErrorCode.INVALID_INPUT)
        self._factories[name] = factory

    def unregister(self, name: str) -> bool:
        """Remove a plugin; returns True if it was registered."""
        return self._factories.pop(name, None) is not None

    def available(self) -> List[str]:
        """Return registered plugin names, sorted."""
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories

    def create(self, name: str, **options: Any) -> TransformCallable:
        """Create one plugin.

        Args:
            name: Registered plugin name
            **options: Keyword arguments passed to the factory

        Raises:
            PluginError: If name is unknown or the factory fails
        """
        try:
            factory = self._factories[name]
        except KeyError:
            raise PluginError(unknown_plugin_message(name)) from None

        try:
            plugin = factory(**options)
        except PluginError:
            raise
        except Exception as e:
            raise PluginError(f"Cannot create plugin '{name}': {e}") from e

        if not callable(plugin):
            raise PluginError(f"Plugin '{name}' did not produce a callable transform")
        return plugin

    def resolve(
        self,
        names: Sequence[str],
        options: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> List[TransformCallable]:
        """Create the plugins named in names, in order.

        Args:
            names: Plugin names
            options: Per-plugin factory keyword arguments

        Returns:
            Ordered list of transform callables
        """
        options = options or {}
        return [self.create(name, **dict(options.get(name, {}))) for name in names]

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> List[str]:
        """Register factories advertised by installed packages.

        Returns:
            Names of the plugins that were registered
        """
        logger = get_logger()
        loaded = []
        for entry_point in entry_points(group=group):
            try:
                factory = entry_point.load()
            except Exception as e:
                logger.warning("Cannot load plugin entry point", name=entry_point.name, error=e)
                continue
            self.register(entry_point.name, factory)
            loaded.append(entry_point.name)
        return loaded


def register_builtins(registry: PluginRegistry) -> None:
    """Register the built-in plugins under their names and their aliases."""
    from minifyimg.plugins.builtins import (
        GifTransform,
        JpegTransform,
        PngTransform,
        SvgTransform,
        WebpTransform,
    )

    registry.register("png", PngTransform)
    registry.register("optipng", partial(PngTransform, name="optipng"))
    registry.register("pngquant", partial(PngTransform, name="pngquant", colors=256))
    registry.register("jpeg", JpegTransform)
    registry.register("jpegtran", partial(JpegTransform, name="jpegtran"))
    registry.register("mozjpeg", partial(JpegTransform, name="mozjpeg", quality=75))
    registry.register("gif", GifTransform)
    registry.register("gifsicle", partial(GifTransform, name="gifsicle"))
    registry.register("svg", SvgTransform)
    registry.register("svgo", partial(SvgTransform, name="svgo"))
    registry.register("webp", WebpTransform)


def get_default_registry(load_entry_points: bool = True) -> PluginRegistry:
    """Return a new registry with the built-in and installed plugins."""
    registry = PluginRegistry()
    register_builtins(registry)
    if load_entry_points:
        registry.load_entry_points()
    return registry
