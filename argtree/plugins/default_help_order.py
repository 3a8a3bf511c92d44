"""
default_help_order: set the order of the help sections of every command.

    processor(App, plugins=[("default_help_order", ["banner", "options", "commands"])])

Sections are the names of the Command._help_<section> methods: desc, banner,
commands, options, plus the ones added by other plugins.
"""
import sys

from . import register


def override(processor, help_order, /):
    order = list(help_order)

    def default_help_order(self):
        return list(order)

    base = processor.Command
    processor.Command = type(base.__name__, (base,), {
        "__module__": base.__module__,
        "default_help_order": default_help_order,
    })


def after_load(processor, help_order, /):
    override(processor, help_order)


register("default_help_order", sys.modules[__name__])
