"""
help_examples: an "Examples:" section at the end of the help.

    command.help_example("tool -v list")
"""
import sys

from . import register


class BuilderMethods:
    def help_example(self, example, /):
        self.node.help_examples = [*(self.node.help_examples or ()), example]


class CommandMethods:
    help_examples = None

    def default_help_order(self):
        return [*super().default_help_order(), "examples"]

    def _help_examples(self, output):
        if self.help_examples:
            output.append("Examples:")
            output += [f"    {example}" for example in self.help_examples]
            output.append("")


register("help_examples", sys.modules[__name__])
