"""
argtree command layer: the nodes of a command tree and how argv walks them.

What this module provides
- Command: one command (or subcommand) of the tree:
  • its own option parser (or the zero-option default, or Skip),
  • the number of arguments its action accepts (exact int or Arity range),
  • an optional terminal action (the "run block"),
  • subcommands, and post subcommands dispatched to from inside an action,
  • help rendering in overridable sections.
- Autoload: a lazy reference to a subcommand defined in another file or module,
  resolved once, on first access.

Dispatch (Command.process)
1. parse this command's leading options from argv into the shared options dict
   (nested under option_key when set);
2. if the next token names a subcommand, drop it and recurse into that subcommand;
3. else if there is an action, check the argument count and call the action;
4. else fail: unknown subcommand, missing subcommand, or a misconfigured tree.

Post dispatch (Command.run)
- called by an action after consuming some arguments itself, e.g.
  `tool NAME subverb ...`: parses post options and dispatches into
  post_subcommands only (there is no action to fall back to).

Actions
- actions are plain callables: action(context, *args, options=..., command=...)
  for an exact arity, action(context, args, options=..., command=...) for a
  range. options and command are passed only when the action's signature
  names them (or takes **kwargs), so `def run(context, name): ...` is enough
  for a one-argument command.

Freezing
- Command.freeze() resolves every autoload, then makes the whole subtree
  immutable. Dispatch is unchanged afterwards and safe to share across threads.
"""
import importlib
import inspect
import runpy
import threading
from inspect import Parameter
from types import MappingProxyType

from .faults import CommandFailure, ProgramBug, FrozenCommandError
from .options import OptionParser, InvalidOption, Skip


def call(callback, /, *args, **keywords):
    """
    call `callback` with the positional arguments and the keyword arguments
    its signature accepts.

    keywords the callback does not name are dropped, unless it takes **kwargs,
    in which case all of them are passed. keywords naming a parameter already
    filled by a positional argument are dropped too. callables without an
    inspectable signature receive every keyword.
    """
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        return callback(*args, **keywords)

    try:
        filled = signature.bind_partial(*args).arguments
    except TypeError:
        filled = {}
    parameters = signature.parameters.values()
    keywords = {name: value for name, value in keywords.items() if name not in filled}
    if not any(parameter.kind is Parameter.VAR_KEYWORD for parameter in parameters):
        accepted = {
            parameter.name for parameter in parameters
            if parameter.kind in (Parameter.POSITIONAL_OR_KEYWORD, Parameter.KEYWORD_ONLY)
        }
        keywords = {name: value for name, value in keywords.items() if name in accepted}
    return callback(*args, **keywords)


class Autoload:
    """
    lazy reference to a subcommand defined elsewhere.

    references
    - a path ending in ".py": the file is executed with runpy, with the owning
      processor available as the global `processor`.
    - anything else: a dotted module name, imported with importlib.

    either way, loading must register the subcommand under the same name as a
    side effect (e.g. `@processor.on("tool", "name")`), replacing this reference
    in the parent's table. the load happens once; concurrent first accesses
    wait for it and observe the same command.
    """
    __slots__ = ("reference", "_lock", "_loaded")

    def __init__(self, reference, /):
        self.reference = str(reference)
        self._lock = threading.Lock()
        self._loaded = False

    def __repr__(self):
        return f"Autoload({self.reference!r})"

    def resolve(self, command, table, name):
        """
        load the reference (first call only) and return the command that
        replaced it in `table` under `name`.

        raises
        - ProgramBug when loading did not put a Command in its place.
        """
        with self._lock:
            if not self._loaded:
                if self.reference.endswith(".py"):
                    runpy.run_path(self.reference, init_globals={"processor": command.processor})
                else:
                    importlib.import_module(self.reference)
                self._loaded = True

        if not isinstance(subcommand := table.get(name), Command):
            raise ProgramBug(f"program bug, autoload of subcommand {name} failed", command)
        return subcommand


class Command:
    """
    a node of the command tree.

    attributes
    - path: tuple of names from the root (empty for the root); read-only.
    - name: the path joined with spaces.
    - subcommands / post_subcommands: name → Command | Autoload.
    - option_parser / post_option_parser: OptionParser, Skip, or None (default parser).
    - option_key / post_option_key: nest parsed options under this key when set.
    - num_args: int (exact) or Arity (range); 0 by default.
    - run_block: the terminal action, or None.
    - invalid_args_message: replaces the generated arity failure text.
    - desc, banner, post_banner: help text.
    - frozen: True once freeze() ran; assigning attributes then raises FrozenCommandError.

    class attributes
    - processor: the Processor owning the per-processor subclass (None here).
    - default_option_parser: frozen parser without options, used when
      option_parser is None; any option given to such a command is invalid.
    """
    processor = None
    default_option_parser = OptionParser().freeze()

    def __init__(self, path=(), /):
        self.path = tuple(path)
        self.name = " ".join(self.path)
        self.subcommands = {}
        self.post_subcommands = {}
        self.option_parser = None
        self.option_key = None
        self.post_option_parser = None
        self.post_option_key = None
        self.num_args = 0
        self.run_block = None
        self.invalid_args_message = None
        self.desc = None
        self.banner = None
        self.post_banner = None

    @property
    def frozen(self):
        return self.__dict__.get("_frozen", False)

    @property
    def where(self):
        """
        how failure messages refer to this command: "command" for the root,
        "<name> subcommand" otherwise.
        """
        return f"{self.name} subcommand" if self.path else "command"

    def __setattr__(self, name, value, /):
        self.check_frozen()
        if name in ("path", "name") and name in self.__dict__:
            raise AttributeError(f"command {name} is read-only")
        object.__setattr__(self, name, value)

    def __repr__(self):
        return f"{type(self).__name__}({', '.join('%s=%r' % pair for pair in self.__rich_repr__())})"

    def __rich_repr__(self):
        yield "path", self.path
        yield "desc", self.desc
        yield "num_args", self.num_args
        yield "subcommands", tuple(self.subcommands)
        yield "post_subcommands", tuple(self.post_subcommands)
        yield "frozen", self.frozen

    def check_frozen(self):
        if self.frozen:
            raise FrozenCommandError(f"can't modify frozen command: {self.name or '(root)'}", self)

    def freeze(self):
        """
        freeze this command and everything below it. idempotent.

        every autoloaded subcommand is loaded first, so the frozen tree never
        changes again; option parsers are frozen and subcommand tables become
        read-only mappings.
        """
        if self.frozen:
            return self
        # load the whole subtree first: a failed autoload must not leave it half frozen
        for _ in self.each_subcommand():
            pass
        for table in (self.subcommands, self.post_subcommands):
            for name in list(table):
                self._subcommand(table, name).freeze()
        for parser in (self.option_parser, self.post_option_parser):
            if parser is not None and parser is not Skip:
                parser.freeze()
        object.__setattr__(self, "subcommands", MappingProxyType(self.subcommands))
        object.__setattr__(self, "post_subcommands", MappingProxyType(self.post_subcommands))
        object.__setattr__(self, "_frozen", True)
        return self

    # -- tree navigation ----------------------------------------------------

    def subcommand(self, name):
        """
        the subcommand named `name` (autoloading it when needed), or None.
        """
        return self._subcommand(self.subcommands, name)

    def post_subcommand(self, name):
        """
        the post subcommand named `name` (autoloading it when needed), or None.
        """
        return self._subcommand(self.post_subcommands, name)

    def _subcommand(self, table, name):
        if isinstance(subcommand := table.get(name), Autoload):
            return subcommand.resolve(self, table, name)
        return subcommand

    def each_local_subcommand(self):
        """
        yield (name, command) for the direct subcommands, then the post subcommands.
        """
        for table in self.help_command_tables().values():
            for name in list(table):
                yield name, self._subcommand(table, name)

    def each_subcommand(self):
        """
        yield this command and every subcommand and post subcommand below it, depth first.
        """
        yield self
        for table in (self.subcommands, self.post_subcommands):
            for name in list(table):
                yield from self._subcommand(table, name).each_subcommand()

    def each_banner(self):
        if self.banner:
            yield self.banner
        if self.post_banner:
            yield self.post_banner

    # -- dispatch -----------------------------------------------------------

    def process(self, context, options, argv):
        """
        process argv for this command: parse options, then dispatch to a
        subcommand, run the action, or fail.

        parameters
        - context: object the action runs against (passed as first argument).
        - options: dict shared by every level of the dispatch; only added to.
        - argv: list[str] of the remaining tokens; consumed in place.

        returns
        - the value returned by the action that ends up running.

        raises
        - CommandFailure for user errors, ProgramBug for tree errors, and
          whatever the action raises (including CommandExit).
        """
        try:
            self.process_command_options(context, options, argv)
        except InvalidOption as error:
            raise CommandFailure(str(error), self) from None

        if argv and argv[0] in self.subcommands:
            return self.process_subcommand(self.subcommands, context, options, argv)

        if self.run_block is not None:
            if not self.valid_args(argv):
                self.raise_invalid_args_failure(argv)
            return self.run_action(context, options, argv)

        self.process_command_failure(argv[0] if argv else None, self.subcommands, "")

    def run(self, context, options, argv):
        """
        dispatch to a post subcommand, from inside this command's action.

        typical use, for `tool NAME subverb`:
            @command.run
            def run(context, argv, options, command):
                context.name = argv.pop(0)
                return command.run(context, options, argv)

        post options are parsed first (post_option_parser/post_option_key);
        the next token must then name a post subcommand.
        """
        try:
            self.process_options(argv, options, self.post_option_key, self.post_option_parser)
        except InvalidOption as error:
            raise CommandFailure(str(error), self) from None

        if argv and argv[0] in self.post_subcommands:
            return self.process_subcommand(self.post_subcommands, context, options, argv)

        self.process_command_failure(argv[0] if argv else None, self.post_subcommands, "post ")

    run_post_subcommand = run

    def process_command_options(self, context, options, argv):
        self.process_options(argv, options, self.option_key, self.option_parser)

    def process_options(self, argv, options, option_key, option_parser):
        """
        parse options with `option_parser` into `options`, or into a fresh dict
        stored at options[option_key] when a key is given.
        """
        if option_parser is Skip:
            return
        if option_parser is None:
            type(self).default_option_parser.order(argv)
            return

        parsed = option_parser.order(argv, {} if option_key is not None else options)
        if option_key is not None:
            options[option_key] = parsed

    def process_subcommand(self, table, context, options, argv):
        subcommand = self._subcommand(table, argv[0])
        del argv[0]
        return self.dispatch(subcommand, context, options, argv)

    def dispatch(self, subcommand, context, options, argv):
        return subcommand.process(context, options, argv)

    def run_action(self, context, options, argv):
        if isinstance(self.num_args, int):
            return call(self.run_block, context, *argv, options=options, command=self)
        return call(self.run_block, context, argv, options=options, command=self)

    def valid_args(self, argv):
        if isinstance(self.num_args, int):
            return len(argv) == self.num_args
        return len(argv) in self.num_args

    def raise_failure(self, message):
        raise CommandFailure(message, self)

    def raise_invalid_args_failure(self, argv):
        if self.invalid_args_message:
            self.raise_failure(f"invalid arguments for {self.where} ({self.invalid_args_message})")
        self.raise_failure(f"invalid number of arguments for {self.where} (accepts: {self.num_args}, given: {len(argv)})")

    def process_command_failure(self, arg, table, prefix):
        if not table:
            raise ProgramBug(f"program bug, no run block or {prefix}subcommands defined for {self.where}", self)
        if arg is not None:
            self.raise_failure(f"invalid {prefix}subcommand: {arg}")
        self.raise_failure(f"no {prefix}subcommand provided")

    # -- help ---------------------------------------------------------------

    def help(self):
        """
        the help text: every section of help_order(), joined with newlines.
        """
        return "\n".join(self.help_lines())

    def help_lines(self):
        output = []
        for section in self.help_order():
            getattr(self, f"_help_{section}")(output)
        return output

    def help_order(self):
        return self.default_help_order()

    def default_help_order(self):
        return ["desc", "banner", "commands", "options"]

    def help_command_tables(self):
        return {"Commands:": self.subcommands, "Post Commands:": self.post_subcommands}

    def help_option_parsers(self):
        return {"Options:": self.option_parser, "Post Options:": self.post_option_parser}

    def omit_option_parser_from_help(self, parser):
        return parser is None or parser is Skip

    def _help_desc(self, output):
        if self.desc:
            output += [self.desc, ""]

    def _help_banner(self, output):
        if banners := list(self.each_banner()):
            output.append("Usage:")
            output += [f"    {banner}" for banner in banners]
            output.append("")

    def _help_commands(self, output):
        subcommands = list(self.each_local_subcommand())
        width = max((len(name) for name, _ in subcommands), default=0)
        for heading, table in self.help_command_tables().items():
            if not table:
                continue
            output.append(heading)
            for name in list(table):
                desc = self._subcommand(table, name).desc or ""
                output.append(f"    {name.ljust(width)}    {desc}".rstrip())
            output.append("")

    def _help_options(self, output):
        for heading, parser in self.help_option_parsers().items():
            if self.omit_option_parser_from_help(parser):
                continue
            output.append(heading)
            output += parser.summarize()
            output.append("")


__all__ = (
    "Command",
    "Autoload",
    "call",
)
