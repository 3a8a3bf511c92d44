"""
help_option_values: an "Allowed Option Values:" section, after the options.

    command.help_option_values("-f", ["json", "yaml", "toml"])

    @command.help_option_values("--user")
    def users(context):
        return context.users()

Values are wrapped to 80 columns after the option name. Values computed from
a function depend on the context: they only show in context_help(context).
"""
import sys

from . import register
from ._context_sensitive_help import ContextHelp
from ..utils import wrap


def before_load(processor, /):
    processor.plugin("_context_sensitive_help")


class ContextWrappedOptionValues(ContextHelp):
    __slots__ = ("name",)

    def __init__(self, name, function, /):
        super().__init__(function)
        self.name = name

    def __call__(self, context):
        return wrap(f"    {self.name}", super().__call__(context))


class BuilderMethods:
    def help_option_values(self, name, values=None, /, *, function=None):
        """
        document the values allowed for option `name`: either a fixed list of
        values, or a function of the context returning them. called with the
        name only, returns a decorator taking the function.
        """
        def wrapper(function, /):
            self._set_help_option_values(name, ContextWrappedOptionValues(name, function))
            return function

        if values is not None:
            self._set_help_option_values(name, list(values))
            return values
        return wrapper(function) if function is not None else wrapper

    def _set_help_option_values(self, name, values):
        self.node.help_option_values = {**(self.node.help_option_values or {}), name: values}


class CommandMethods:
    help_option_values = None

    def default_help_order(self):
        order = super().default_help_order()
        if "options" in order:
            order.insert(order.index("options") + 1, "option_values")
        else:
            order.append("option_values")
        return order

    def _help_option_values(self, output):
        if self.help_option_values:
            output.append("Allowed Option Values:")
            for name, values in self.help_option_values.items():
                if isinstance(values, ContextWrappedOptionValues):
                    output.append(values)
                else:
                    output += wrap(f"    {name}", values)
            output.append("")


register("help_option_values", sys.modules[__name__])
