"""
cache_help_output: compute each command's help once, when the tree is frozen.
"""
import sys

from . import register


class CommandMethods:
    def freeze(self):
        if self.frozen:
            return self
        super().freeze()
        object.__setattr__(self, "_help", self.help())
        return self

    def help(self):
        if (help := self.__dict__.get("_help")) is not None:
            return help
        return super().help()


register("cache_help_output", sys.modules[__name__])
