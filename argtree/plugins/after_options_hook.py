"""
after_options_hook: run a hook right after a command parsed its options.

    @command.after_options
    def after_options(context, argv, options):
        ...

The hook receives the context, plus argv and options when its signature
names them. It runs before subcommand dispatch and before the argument count
is checked, so it may still change argv.
"""
import sys

from . import register
from ..commands import call


class BuilderMethods:
    def after_options(self, hook, /):
        """
        set the hook run after option parsing. usable as a decorator.
        """
        if not callable(hook):
            raise TypeError("after_options() argument must be callable")
        self.node.after_options = hook
        return hook


class CommandMethods:
    after_options = None

    def process_command_options(self, context, options, argv):
        super().process_command_options(context, options, argv)
        if self.after_options is not None:
            call(self.after_options, context, argv=argv, options=options)


register("after_options_hook", sys.modules[__name__])
