"""
usages: the help of every command of the tree, by command name.
"""
import sys

from . import register


class ProcessorMethods:
    def usages(self):
        """
        map every command name ("" for the root) to its help text.
        """
        return {command.name: command.help() for command in self.root.each_subcommand()}


register("usages", sys.modules[__name__])
