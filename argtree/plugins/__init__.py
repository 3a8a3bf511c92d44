"""
argtree plugin registry.

A plugin is any object, usually a module, exposing some of:
- CommandMethods, BuilderMethods, OptionParserMethods, ProcessorMethods:
  mixin classes composed in front of a processor's classes when loaded;
- before_load(processor, *args, **kwargs) / after_load(processor, *args, **kwargs).

Plugins shipped with argtree live in this package and register themselves
when imported:

    register("help_examples", sys.modules[__name__])

Processor.plugin("name") imports argtree.plugins.<name> on demand.
"""
import importlib
import threading

from ..faults import ProgramBug

_lock = threading.Lock()
_registry = {}


def register(name, plugin, /):
    """
    register `plugin` under `name`, replacing any previous registration.
    """
    with _lock:
        _registry[name] = plugin
    return plugin


def fetch(name, /):
    """
    the plugin registered under `name`, or None.
    """
    with _lock:
        return _registry.get(name)


def name_of(plugin, /):
    """
    the name `plugin` is registered under; for unregistered plugins, its
    __name__ (or its repr).
    """
    with _lock:
        for name, registered in _registry.items():
            if registered is plugin:
                return name
    return getattr(plugin, "__name__", repr(plugin))


def load(name, /):
    """
    the plugin registered under `name`, importing argtree.plugins.<name> first
    when it is not registered yet.

    raises
    - ProgramBug when no plugin is registered under `name` afterwards.
    """
    if (plugin := fetch(name)) is not None:
        return plugin
    try:
        importlib.import_module(f"{__name__}.{name}")
    except ModuleNotFoundError as error:
        if error.name != f"{__name__}.{name}":
            raise
    if (plugin := fetch(name)) is None:
        raise ProgramBug(f"program bug, plugin {name} could not be loaded")
    return plugin


__all__ = (
    "register",
    "fetch",
    "name_of",
    "load",
)
