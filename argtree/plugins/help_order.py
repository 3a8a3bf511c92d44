"""
help_order: per-command order of the help sections.

    command.help_order("desc", "options")

Loading it with default_help_order=[...] also sets the order used by the
commands without their own.
"""
import sys

from . import register
from .default_help_order import override


def after_load(processor, /, *, default_help_order=None):
    if default_help_order is not None:
        override(processor, default_help_order)


class BuilderMethods:
    def help_order(self, *sections):
        self.node.help_sections = sections


class CommandMethods:
    help_sections = None

    def help_order(self):
        if self.help_sections is not None:
            return list(self.help_sections)
        return super().help_order()


register("help_order", sys.modules[__name__])
