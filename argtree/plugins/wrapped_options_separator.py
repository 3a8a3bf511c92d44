"""
wrapped_options_separator: summary separators listing wrapped values.

    parser.wrap("Formats:", ["json", "yaml", "toml"], limit=40)
"""
import sys

from . import register
from ..utils import wrap


class OptionParserMethods:
    def wrap(self, prefix, values, /, *, separator=" ", limit=80):
        """
        add the lines of utils.wrap(prefix, values) as summary separators.

        returns
        - the lines added.
        """
        lines = wrap(prefix, values, separator=separator, limit=limit)
        for line in lines:
            self.separator(line)
        return lines


register("wrapped_options_separator", sys.modules[__name__])
