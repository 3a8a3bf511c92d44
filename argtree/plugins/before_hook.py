"""
before_hook: run a hook before a command dispatches to a subcommand or runs
its action.

    @command.before
    def before(context, argv, options):
        ...

The hook is not run when processing fails at the command (invalid or missing
subcommand, wrong number of arguments).
"""
import sys

from . import register
from ..commands import call


class BuilderMethods:
    def before(self, hook, /):
        """
        set the hook run before dispatch. usable as a decorator.
        """
        if not callable(hook):
            raise TypeError("before() argument must be callable")
        self.node.before = hook
        return hook


class CommandMethods:
    before = None

    def _run_before(self, context, options, argv):
        if self.before is not None:
            call(self.before, context, argv=argv, options=options)

    def dispatch(self, subcommand, context, options, argv):
        self._run_before(context, options, argv)
        return super().dispatch(subcommand, context, options, argv)

    def run_action(self, context, options, argv):
        self._run_before(context, options, argv)
        return super().run_action(context, options, argv)


register("before_hook", sys.modules[__name__])
