"""
argtree processors: the application-level owner of a command tree.

What this module provides
- Processor: binds a root Command to a context factory and exposes the single
  entry point process(argv), plus tree-wide operations (locate, freeze,
  incremental definition with on()/command(), plugin loading).
- processor(...): create a Processor, load plugins and configure its root, or
  return a decorator doing so.
- invoke(processor, prompt): shell runner; reports exits and failures with
  rich and exits the process with the matching status.

Quick start
    from argtree import processor, invoke

    class App(list):
        pass

    @processor(App, plugins=["help_examples"])
    def app(command):
        command.options("tool [options] command ...", lambda parser: (
            parser.on("-v", "--verbose", help="verbose output"),
            parser.on("--version", help="show version", handler=lambda: parser.halt("1.0")),
        ))

        @command.command("greet", args=1)
        def greet(context, name, options):
            return f"hello {name}" + ("!" if options.get("verbose") else "")

    if __name__ == "__main__":
        print(invoke(app))

Per-processor types
- every processor owns subclasses of Command, Builder and OptionParser
  (processor.Command, processor.Builder, processor.OptionParser). plugins are
  composed into those subclasses, so two processors never share plugin behavior.
"""
import shlex
import sys
from collections.abc import Iterable

from . import plugins as registry
from .builders import Builder
from .commands import Command
from .faults import CommandExit, ProgramBug, report
from .options import OptionParser
from .utils import Unset, rename

# Extension points a plugin may provide, and the processor attribute they compose into.
_EXTENSIONS = (
    ("CommandMethods", "Command"),
    ("BuilderMethods", "Builder"),
    ("OptionParserMethods", "OptionParser"),
)


class Processor:
    """
    owner of one command tree.

    parameters
    - context: callable (usually a class) building the object actions run
      against; process() calls it with its extra arguments.
    - fancy / colorful: rendering options used by invoke().

    attributes
    - root: the root Command (created empty on first access).
    - plugins: name → plugin, in load order.
    - Command / Builder / OptionParser: the composed per-processor classes.
    """

    def __init__(self, context, /, *, fancy=False, colorful=True):
        if not callable(context):
            raise TypeError("processor context must be callable")
        self.context = context
        self.fancy = fancy
        self.colorful = colorful
        self.plugins = {}
        self._loading = []
        self._root = None
        self.Command = type("Command", (Command,), {"processor": self, "__module__": Command.__module__})
        self.Builder = type("Builder", (Builder,), {"processor": self, "__module__": Builder.__module__})
        self.OptionParser = type("OptionParser", (OptionParser,), {"__module__": OptionParser.__module__})

    def __repr__(self):
        return f"{type(self).__name__}(context={self.context!r}, plugins={tuple(self.plugins)!r})"

    @property
    def root(self):
        if self._root is None:
            self._root = self.Builder.build(())
        return self._root

    @property
    def frozen(self):
        return self._root is not None and self._root.frozen

    # -- plugins --------------------------------------------------------------

    def plugin(self, plugin, /, *args, **kwargs):
        """
        load a plugin into this processor.

        parameters
        - plugin: a registered plugin name (imported from argtree.plugins when
          not registered yet) or a plugin object.
        - args, kwargs: forwarded to the plugin's before_load/after_load hooks.

        behavior
        - a plugin already loaded (or being loaded) is not loaded again.
        - before_load(processor, ...) runs first and may load other plugins.
        - CommandMethods/BuilderMethods/OptionParserMethods/ProcessorMethods
          mixins are composed in front of the current classes, so their
          methods can extend the previous ones with super().
        - after_load(processor, ...) runs last.

        raises
        - ProgramBug when the named plugin cannot be found, or when the
          command tree has already been built.
        """
        name = plugin if isinstance(plugin, str) else registry.name_of(plugin)
        if isinstance(plugin, str):
            plugin = registry.load(plugin)

        if any(loaded is plugin for loaded in (*self.plugins.values(), *self._loading)):
            return self
        if self._root is not None:
            raise ProgramBug(f"program bug, plugin {name} loaded after the command tree was built")

        self._loading.append(plugin)
        try:
            if before_load := getattr(plugin, "before_load", None):
                before_load(self, *args, **kwargs)

            for extension, attribute in _EXTENSIONS:
                if mixin := getattr(plugin, extension, None):
                    base = getattr(self, attribute)
                    setattr(self, attribute, type(base.__name__, (mixin, base), {"__module__": base.__module__}))
            if mixin := getattr(plugin, "ProcessorMethods", None):
                self.__class__ = type(type(self).__name__, (mixin, type(self)), {"__module__": type(self).__module__})

            self.plugins[name] = plugin
        finally:
            self._loading.remove(plugin)

        if after_load := getattr(plugin, "after_load", None):
            after_load(self, *args, **kwargs)
        return self

    # -- tree -----------------------------------------------------------------

    def configure(self, configure, /):
        """
        configure the root command with `configure(builder)`. returns the processor.
        """
        configure(self.builder())
        return self

    def locate(self, *names):
        """
        the command at the path `names` (the root when empty), autoloading on
        the way. post subcommands are found when no subcommand has the name.

        raises
        - KeyError when a name does not exist.
        """
        command = self.root
        for index, name in enumerate(names):
            if (subcommand := command.subcommand(name)) is None:
                subcommand = command.post_subcommand(name)
            if subcommand is None:
                raise KeyError(" ".join(names[:index + 1]))
            command = subcommand
        return command

    def builder(self, *names):
        """
        a builder bound to the existing command at `names`.
        """
        return self.Builder(self.locate(*names))

    def on(self, *names):
        """
        decorator defining (or replacing) the command at `names`; every name
        but the last must already exist.

            @app.on("remote", "add")
            def add(command):
                ...

        returns
        - a decorator returning the new Command.
        """
        if not names:
            raise TypeError("on() requires at least one command name")
        *parents, name = names
        return self.builder(*parents).on(name)

    def command(self, *names, args=0, invalid_args_message=None):
        """
        decorator defining the leaf command at `names` from its action.
        """
        if not names:
            raise TypeError("command() requires at least one command name")
        *parents, name = names
        return self.builder(*parents).command(name, args=args, invalid_args_message=invalid_args_message)

    def freeze(self):
        """
        freeze the whole tree. idempotent; afterwards every change raises
        FrozenCommandError while process() behaves exactly as before.
        """
        self.root.freeze()
        return self

    # -- processing -----------------------------------------------------------

    def process(self, argv, /, *args, **kwargs):
        """
        process argv with a new context, built as context(*args, **kwargs).

        returns
        - the value returned by the action that ran.

        raises
        - CommandExit for early exits, CommandFailure (and ProgramBug) for failures;
          callers should catch CommandExit and check `failure`.
        """
        return self.root.process(self.context(*args, **kwargs), {}, list(argv))


def processor(context, configure=Unset, /, *, plugins=(), **options):
    """
    create a Processor or return a decorator to build it.

    invocation modes
    - direct:    app = processor(App, configure, plugins=[...])
    - decorator: @processor(App, plugins=[...])
                 def app(command): ...

    parameters
    - context: callable building the action context for each process() call.
    - configure: callable receiving the root builder, or None for an empty root.
    - plugins: plugin names/objects, or (name, *args) tuples, loaded in order
      before the tree is built.
    - options: forwarded to Processor (fancy, colorful).

    returns
    - Processor | Callable[[Callable], Processor]
    """
    @rename("processor")
    def wrapper(configure, /):
        instance = Processor(context, **options)
        for plugin in plugins:
            if isinstance(plugin, tuple):
                instance.plugin(*plugin)
            else:
                instance.plugin(plugin)
        if configure is not None:
            instance.configure(configure)
        return instance

    return wrapper(configure) if configure is not Unset else wrapper


def invoke(processor, prompt=Unset, /, *args, **kwargs):
    """
    run a processor as a shell program.

    parameters
    - prompt:
      • Unset: read sys.argv[1:].
      • str: shell-like string; split via shlex.split.
      • Iterable[str]: pre-tokenized sequence.
    - args, kwargs: forwarded to the context factory.

    behavior
    - returns the action's value when the command completes.
    - on CommandExit, prints it with rich (stdout for early exits, stderr with
      usage for failures) and exits with status 0 or 1 respectively.

    raises
    - TypeError when prompt is not Unset/str/Iterable[str].
    - SystemExit after reporting an exit or failure.
    """
    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() prompt must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    try:
        return processor.process(tokens, *args, **kwargs)
    except CommandExit as exit:
        sys.exit(report(exit, fancy=processor.fancy, colorful=processor.colorful))


__all__ = (
    "Processor",
    "processor",
    "invoke",
)
