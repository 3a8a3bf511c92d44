"""
argtree builder: the configuration language of a command tree.

A Builder is bound to exactly one Command and only writes to it. Configuration
functions receive a builder and describe their command; nested commands get
their own builder through on()/post_on():

    def configure(command):
        command.desc("Example tool")
        command.options("tool [options] [subcommand ...]", lambda parser: (
            parser.on("-v", help="verbose output"),
        ))

        @command.on("list")
        def list_(command):
            command.args((0, ...))

            @command.run
            def run(context, argv, options):
                ...

        @command.command("version")
        def version(context):
            return "1.0"

Most methods accept their configuration callable directly, or act as
decorators when it is omitted (on, post_on, options, post_options, command,
post_command, run).

Frozen commands reject every change with FrozenCommandError.
"""
import importlib
import os
import os.path
import pkgutil

from .commands import Autoload, Command
from .options import OptionParser, Skip
from .utils import Arity, Unset


class Builder:
    """
    write-only façade over one Command.

    attributes
    - node: the Command being configured.

    class attributes
    - processor: the Processor whose composed Command/Builder/OptionParser
      classes are used for new nodes (None for the plain base classes).
    """
    processor = None

    def __init__(self, node, /):
        self.node = node

    def __repr__(self):
        return f"{type(self).__name__}({self.node!r})"

    @classmethod
    def build(cls, path=(), configure=None, /):
        """
        create a Command at `path` and run `configure` with a builder bound to it.

        returns
        - the new Command.
        """
        node = (cls.processor.Command if cls.processor is not None else Command)(path)
        if configure is not None:
            configure(cls(node))
        return node

    def _option_parser_class(self):
        return self.processor.OptionParser if self.processor is not None else OptionParser

    # -- description ----------------------------------------------------------

    def desc(self, description, /):
        """
        set the description shown in the command's help and in its parent's listing.
        """
        self.node.desc = description

    def banner(self, banner, /):
        """
        set the usage banner for running the command and its subcommands.
        """
        self.node.banner = banner

    def post_banner(self, banner, /):
        """
        set the usage banner for the command's post subcommands.
        """
        self.node.post_banner = banner

    # -- options --------------------------------------------------------------

    def _create_option_parser(self, banner, configure):
        parser = self._option_parser_class()(banner)
        configure(parser)
        return parser

    def options(self, banner, configure=Unset, /, *, key=None):
        """
        set the option parser of the command, parsed before running it or
        dispatching to its subcommands.

        parameters
        - banner: usage banner of the command.
        - configure: callable receiving the new OptionParser to define options.
          omit it to use options() as a decorator.
        - key: when given, parsed options are stored in options[key] instead
          of directly in the shared options dict.

        returns
        - the OptionParser (or a decorator returning it).
        """
        def wrapper(configure, /):
            parser = self._create_option_parser(banner, configure)
            self.node.banner = banner
            self.node.option_key = key
            self.node.option_parser = parser
            return parser

        return wrapper(configure) if configure is not Unset else wrapper

    def post_options(self, banner, configure=Unset, /, *, key=None):
        """
        same as options(), for the options parsed by Command.run() before
        dispatching to a post subcommand.
        """
        def wrapper(configure, /):
            parser = self._create_option_parser(banner, configure)
            self.node.post_banner = banner
            self.node.post_option_key = key
            self.node.post_option_parser = parser
            return parser

        return wrapper(configure) if configure is not Unset else wrapper

    def skip_option_parsing(self, banner, /):
        """
        do not parse options for the command: every token, including the ones
        starting with a dash, is an argument. useful to pass the remaining argv
        to another program. the banner sets the command usage.
        """
        self.node.banner = banner
        self.node.option_parser = Skip

    # -- arguments and action -------------------------------------------------

    def args(self, args, /, *, invalid_args_message=None):
        """
        set the number of arguments the action accepts.

        - int: exactly that many; the action receives them as separate arguments.
        - range, (low, high) or (low, ...): any count in the inclusive range;
          the action receives a single list.

        invalid_args_message replaces the generated "accepts: ..., given: ..."
        text of the failure raised for a wrong count.
        """
        self.node.num_args = Arity.coerce(args)
        self.node.invalid_args_message = invalid_args_message

    def run(self, action, /):
        """
        set the action run when the command itself is requested.

        usable as a decorator; returns the action unchanged.
        """
        if not callable(action):
            raise TypeError("run() argument must be callable")
        self.node.run_block = action
        return action

    # -- subcommands ----------------------------------------------------------

    def _on(self, table, name, configure):
        self.node.check_frozen()
        node = type(self).build((*self.node.path, name), configure)
        table[name] = node
        return node

    def on(self, name, configure=Unset, /):
        """
        create (or replace) the subcommand `name`, configured by `configure`
        with its own builder. None creates it unconfigured.

        usable as a decorator; returns the new Command.
        """
        def wrapper(configure, /):
            return self._on(self.node.subcommands, name, configure)

        return wrapper(configure) if configure is not Unset else wrapper

    def post_on(self, name, configure=Unset, /):
        """
        same as on(), for a post subcommand.
        """
        def wrapper(configure, /):
            return self._on(self.node.post_subcommands, name, configure)

        return wrapper(configure) if configure is not Unset else wrapper

    def _command(self, on, name, action, args, invalid_args_message):
        def wrapper(action, /):
            def configure(command):
                command.args(args, invalid_args_message=invalid_args_message)
                command.run(action)

            on(name, configure)
            return action

        return wrapper(action) if action is not Unset else wrapper

    def command(self, name, action=Unset, /, *, args=0, invalid_args_message=None):
        """
        shortcut for a subcommand that only has an action:

            @command.command("hello", args=1)
            def hello(context, who):
                ...

        is the same as on("hello") with args(1) and run(hello).
        usable as a decorator; returns the action unchanged.
        """
        return self._command(self.on, name, action, args, invalid_args_message)

    def post_command(self, name, action=Unset, /, *, args=0, invalid_args_message=None):
        """
        same as command(), for a post subcommand.
        """
        return self._command(self.post_on, name, action, args, invalid_args_message)

    # -- autoloading ----------------------------------------------------------

    def _autoload_subcommand_dir(self, table, directory):
        self.node.check_frozen()
        for filename in sorted(os.listdir(directory)):
            name, extension = os.path.splitext(filename)
            if extension == ".py" and not name.startswith("__"):
                table[name] = Autoload(os.path.abspath(os.path.join(directory, filename)))

    def _autoload_subcommand_package(self, table, package):
        self.node.check_frozen()
        module = importlib.import_module(package)
        for metadata in pkgutil.iter_modules(module.__path__):
            table[metadata.name] = Autoload(f"{module.__name__}.{metadata.name}")

    def autoload_subcommand_dir(self, directory, /):
        """
        register every "<name>.py" file of `directory` as the subcommand
        `name`, loaded the first time it is needed.

        each file runs with the processor as the global `processor` and must
        define its subcommand, e.g. `@processor.on("tool", "name")`.
        """
        self._autoload_subcommand_dir(self.node.subcommands, directory)

    def autoload_post_subcommand_dir(self, directory, /):
        """
        same as autoload_subcommand_dir(), for post subcommands.
        """
        self._autoload_subcommand_dir(self.node.post_subcommands, directory)

    def autoload_subcommand_package(self, package, /):
        """
        register every module of the importable `package` as a subcommand of
        the same name, imported the first time it is needed. the module must
        define its subcommand when imported.
        """
        self._autoload_subcommand_package(self.node.subcommands, package)

    def autoload_post_subcommand_package(self, package, /):
        """
        same as autoload_subcommand_package(), for post subcommands.
        """
        self._autoload_subcommand_package(self.node.post_subcommands, package)


__all__ = (
    "Builder",
)
