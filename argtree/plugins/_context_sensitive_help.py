"""
_context_sensitive_help: help lines computed from a context.

Internal plugin, loaded by the plugins that need it. A ContextHelp entry in
the help lines is left out of help(), and evaluated by context_help(context).
"""
import sys

from . import register


class ContextHelp:
    """
    help entry computed on demand: function(context) returns a line or a list of lines.
    """
    __slots__ = ("function",)

    def __init__(self, function, /):
        if not callable(function):
            raise TypeError("context help must be callable")
        self.function = function

    def __call__(self, context):
        return self.function(context)


class CommandMethods:
    def context_help(self, context):
        """
        the help text with the context-sensitive entries evaluated against `context`.
        """
        lines = []
        for line in self.help_lines(include_context_help=True):
            if isinstance(line, ContextHelp):
                line = line(context)
            if isinstance(line, str):
                lines.append(line)
            else:
                lines += line
        return "\n".join(lines)

    def help_lines(self, include_context_help=False):
        lines = super().help_lines()
        if not include_context_help:
            lines = [line for line in lines if not isinstance(line, ContextHelp)]
        return lines


register("_context_sensitive_help", sys.modules[__name__])
