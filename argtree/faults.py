"""
argtree exits and failures, plus their rendering.

Scope
- CommandExit: a command finished early, successfully (e.g. `--version`).
- CommandFailure: the user asked for something the tree cannot do (invalid
  option, wrong number of arguments, unknown or missing subcommand). Carries
  the command the failure is attributed to, so the caller can show the message
  together with that command's usage.
- ProgramBug: a CommandFailure reserved for tree authoring mistakes (a command
  with neither action nor subcommands, an autoload that defined nothing, a
  plugin that cannot be loaded).
- FrozenCommandError: a ProgramBug raised when a frozen tree is mutated.
- render()/report(): rich rendering of any of the above for shell use.

Propagation
- The dispatch engine never catches, logs or recovers from these; they travel
  up to the caller of Processor.process(). invoke() is the batteries-included
  caller that reports them and exits.

Styling
- The host application may define __styles__ (style name → rich style) and
  __prog__ (program name) in __main__ to customize the rendered header.
"""
import os.path
import sys
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

stdout = Console(highlight=False)
stderr = Console(stderr=True, highlight=False)


class CommandExit(Exception):
    """
    base class for every way a command can finish other than by returning.

    direct instances represent successful early exits: an option handler calls
    `parser.halt("0.1.0")`, or an action raises CommandExit(help) itself.

    callers of Processor.process() are expected to catch CommandExit to handle
    both early exits and failures, telling them apart with `failure`.
    """
    failure = False

    def __init__(self, message="", /):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class CommandFailure(CommandExit):
    """
    user-facing failure of a command line.

    attributes
    - message: the failure text ("invalid subcommand: z").
    - command: the Command the failure is attributed to, or None.
    """
    failure = True

    def __init__(self, message="", command=None, /):
        super().__init__(message)
        self.command = command

    @property
    def message_with_usage(self):
        """
        the message followed by the attributed command's help, separated by a
        blank line. only the message when there is no help to show.
        """
        help = self.command.help() if self.command is not None else ""
        if not help:
            return self.message
        return f"{self.message}\n\n{help}"


class ProgramBug(CommandFailure):
    """
    failure caused by the program, not by the user: the tree is misconfigured.
    """


class FrozenCommandError(ProgramBug):
    """
    raised when a frozen command, its subcommand tables or its option parser are changed.
    """


def _prog():
    main = sys.modules.get("__main__")
    if prog := getattr(main, "__prog__", None):
        return prog
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argtree"


def render(exit, /, *, fancy=False, colorful=True):
    """
    build a rich renderable for an exit or a failure.

    layout
    - early exits render their message as-is (typically help or version text).
    - failures render a header line "[ prog | error ]" (or "program bug" for
      ProgramBug), the message, and the usage of the attributed command.
    - fancy=True wraps failures in a Panel titled with the header.
    - colorful=False drops every style (plain text output).
    """
    if not isinstance(exit, CommandExit):
        raise TypeError("render() argument must be a command exit")

    main = sys.modules.get("__main__")
    styles = defaultdict(str, {
        "prog-name": "bold #E6E6F0",
        "error-title": "bold #FF4DA6",
        "error-message": "#C8C8D0",
        "usage": "#9CE19C",
    } | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        return Text(str(fragment), styles[style] if colorful and style else "")

    if not exit.failure:
        return text(exit.message)

    title = "program bug" if isinstance(exit, ProgramBug) else "error"
    header = Text.assemble("[ ", text(_prog(), "prog-name"), " | ", text(title, "error-title"), " ]")
    message = text(exit.message, "error-message")

    renders = [message]
    if exit.command is not None and (help := exit.command.help()):
        renders += [Text(""), text(help.rstrip("\n"), "usage")]

    if fancy:
        return Panel(Group(*renders), title=header, title_align="left")
    return Group(header, *renders)


def report(exit, /, *, fancy=False, colorful=True):
    """
    print an exit or failure and return the matching process status.

    - early exits go to stdout and return 0.
    - failures go to stderr and return 1.
    """
    (stderr if exit.failure else stdout).print(render(exit, fancy=fancy, colorful=colorful))
    return 1 if exit.failure else 0


__all__ = (
    "CommandExit",
    "CommandFailure",
    "ProgramBug",
    "FrozenCommandError",
    "render",
    "report",
)
