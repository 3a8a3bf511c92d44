"""
argtree option parsing: the tokenizer contract commands rely on.

What this module provides
- OptionParser: a getopt-style parser built on the standard optparse module,
  configured for in-order parsing:
  • order(argv, into) consumes the leading run of options from argv (in place)
    and stops at the first operand or after a "--" terminator.
  • only options actually given are written into the target mapping.
  • unknown or malformed options raise InvalidOption instead of exiting.
  • no hidden options (--help/--version) are added; only the ones you define.
  • summarize() renders the definition lines used by command help.
- InvalidOption: the typed error commands turn into a CommandFailure.
- Skip: sentinel a command uses to bypass option parsing entirely, passing
  every token through as an argument.

Defining options
    parser.on("-v", help="verbose output")                 # flag → True
    parser.on("-k", "--key=NAME", help="set key")          # value option → "NAME" value
    parser.on("--version", handler=lambda: parser.halt("1.0"))
    parser.add_option("-n", type="int", dest="count")      # full optparse power
    parser.separator("Extra lines shown in the summary")

Keys
- Values are stored under the optparse destination: the first long name without
  dashes (dashes become underscores), else the short letter ("-v" → "v").
"""
import functools
import optparse
import threading
from typing import final

from .faults import CommandExit, FrozenCommandError

# Width of the switch column, and indentation, of summary lines.
SUMMARY_WIDTH = 32
SUMMARY_INDENT = " " * 4


class InvalidOption(Exception):
    """
    raised by OptionParser.order() for options the parser cannot accept:
    unknown or ambiguous switches, missing or unexpected values, values that
    fail type conversion.
    """


@final
class SkipType:
    """
    sentinel set as a command's option parser to skip option parsing.

    every remaining token, including ones that look like options, is handed to
    the command as an argument. this differs from the default parser, which
    accepts no options at all and fails on any.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __repr__(self):
        return "Skip"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'SkipType' is not an acceptable base type")


Skip = SkipType()


def _parse_switch(switch):
    """
    split a switch definition into (name, metavar).

    "--key=NAME" and "--key NAME" (and "-k NAME") declare a value; a bare
    name declares a flag (metavar None).
    """
    name, _, metavar = switch.replace(" ", "=", 1).partition("=")
    return name, metavar or None


def _guarded(method):
    """
    wrap an inherited optparse mutator so it fails on a frozen parser.
    """
    @functools.wraps(method)
    def wrapper(self, /, *args, **kwargs):
        self._check_frozen()
        return method(self, *args, **kwargs)

    return wrapper


class OptionParser(optparse.OptionParser):
    """
    in-order option parser with a summary renderer and early-exit support.

    parameters
    - banner: str, informational usage line kept for introspection; command
      help uses the command's own banner.

    state
    - a parser instance keeps per-parse state (optparse design), so order()
      serializes concurrent use of the same instance with a lock.
    """

    def __init__(self, banner="", /):
        self._summary = []
        self._frozen = False
        self._lock = threading.Lock()
        super().__init__(usage=optparse.SUPPRESS_USAGE, add_help_option=False)
        self.disable_interspersed_args()
        self.banner = banner

    @property
    def frozen(self):
        return self._frozen

    def freeze(self):
        """
        forbid any further option or separator definition. idempotent.
        """
        self._frozen = True
        return self

    def _check_frozen(self):
        if self._frozen:
            raise FrozenCommandError("can't modify frozen option parser")

    remove_option = _guarded(optparse.OptionParser.remove_option)
    add_option_group = _guarded(optparse.OptionParser.add_option_group)
    enable_interspersed_args = _guarded(optparse.OptionParser.enable_interspersed_args)
    disable_interspersed_args = _guarded(optparse.OptionParser.disable_interspersed_args)
    set_defaults = _guarded(optparse.OptionParser.set_defaults)
    set_default = _guarded(optparse.OptionParser.set_default)
    set_usage = _guarded(optparse.OptionParser.set_usage)
    set_description = _guarded(optparse.OptionParser.set_description)
    set_conflict_handler = _guarded(optparse.OptionParser.set_conflict_handler)
    set_process_default_values = _guarded(optparse.OptionParser.set_process_default_values)

    def add_option(self, *args, **kwargs):
        self._check_frozen()
        option = super().add_option(*args, **kwargs)
        self._summary.append(option)
        return option

    def on(self, *switches, help=None, handler=None):
        """
        define a flag or a value option.

        parameters
        - switches: one or more names ("-k", "--key=NAME"); a "=VALUE" or
          " VALUE" suffix on any of them makes the option take a value.
        - help: description shown in the summary.
        - handler: optional callable; called with the value (value options)
          or without arguments (flags) when the option is seen. its return
          value is stored instead of the raw value. handlers may call halt().

        returns
        - the optparse Option created.
        """
        names = []
        metavar = None
        for switch in switches:
            name, value = _parse_switch(switch)
            names.append(name)
            metavar = metavar or value

        longs = [name for name in names if name.startswith("--")]
        dest = longs[0][2:].replace("-", "_") if longs else names[0][1:]

        keywords = {"dest": dest, "help": help}
        if metavar:
            keywords |= {"metavar": metavar, "type": "string"}

        if handler is None:
            return self.add_option(*names, action="store" if metavar else "store_true", **keywords)

        def callback(option, opt, value, parser):
            setattr(parser.values, dest, handler(value) if metavar else handler())

        return self.add_option(*names, action="callback", callback=callback, **keywords)

    def separator(self, line):
        """
        add a free-form line to the summary, after the options defined so far.
        """
        self._check_frozen()
        self._summary.append(str(line))

    def halt(self, message=""):
        """
        stop processing with an early, successful exit carrying `message`.
        """
        raise CommandExit(message)

    def error(self, msg):
        raise InvalidOption(msg)

    def order(self, argv, into=None):
        """
        parse the leading options of argv in order, removing them from argv.

        parameters
        - argv: list[str], modified in place; on return it starts with the
          first operand (a "--" terminator is consumed).
        - into: dict receiving the options given (None to discard them).

        returns
        - the `into` mapping (a fresh dict when None was given).

        raises
        - InvalidOption for unknown/ambiguous switches and bad values.
        - CommandExit when a handler halts.
        """
        into = {} if into is None else into
        with self._lock:
            self.rargs = rargs = list(argv)
            self.largs = largs = []
            self.values = values = optparse.Values()
            try:
                self._process_args(largs, rargs, values)
            except optparse.AmbiguousOptionError as error:
                raise InvalidOption(f"ambiguous option: {error.opt_str}") from None
            except optparse.BadOptionError as error:
                raise InvalidOption(f"invalid option: {error.opt_str}") from None
            except optparse.OptionValueError as error:
                raise InvalidOption(str(error)) from None
            finally:
                self.rargs = self.largs = self.values = None
        argv[:] = largs + rargs
        into.update(vars(values))
        return into

    def summarize(self):
        """
        render the summary lines: one per option (two when the switches do
        not fit the column) plus the separators, in definition order.
        """
        lines = []
        for entry in self._summary:
            if isinstance(entry, str):
                lines.append(entry)
            elif entry.help != optparse.SUPPRESS_HELP:
                lines += _summarize_option(entry)
        return lines


def _summarize_option(option):
    metavar = option.metavar or (option.dest or "value").upper()
    takes_value = option.takes_value()

    longs = [f"{name}={metavar}" if takes_value else name for name in option._long_opts]
    shorts = [f"{name} {metavar}" if takes_value and not longs else name for name in option._short_opts]
    switches = ", ".join(shorts + longs)
    if not shorts:
        switches = SUMMARY_INDENT + switches

    if not option.help:
        return [SUMMARY_INDENT + switches]
    if len(switches) > SUMMARY_WIDTH:
        return [SUMMARY_INDENT + switches, SUMMARY_INDENT + " " * (SUMMARY_WIDTH + 1) + option.help]
    return [SUMMARY_INDENT + switches.ljust(SUMMARY_WIDTH) + " " + option.help]


__all__ = (
    "OptionParser",
    "InvalidOption",
    "SkipType",
    "Skip",
)
