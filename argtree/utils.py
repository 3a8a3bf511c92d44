"""
argtree utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the command, builder, option and plugin layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks.

- Arity
  • Inclusive range of accepted positional argument counts ("1...", "0..3").

- wrap(prefix, values)
  • Lay out a list of values after a prefix, breaking lines at a width limit.

Stability and contract
- These utilities are re-exported via __all__; names not in __all__ are internal.

Quick examples
    >>> 2 in Arity(1)
    True
    >>> wrap("Foo:", ["bar", "baz"], limit=10)
    ['Foo: bar', '     baz']
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator

    Notes
    - Only metadata changes; behavior is untouched.
    - Built-in callables are not updatable and raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


@final
class Arity:
    """
    Inclusive range of positional argument counts accepted by a command.

    Shape
    - low: int, the minimum count (>= 0).
    - high: int | None, the maximum count; None means unbounded.

    Behavior
    - Membership: `count in arity` tests low <= count <= high.
    - Display: str(Arity(1)) -> "1...", str(Arity(0, 3)) -> "0..3"
      (used verbatim in "accepts: ..." failure messages).

    Construction
    - Arity.coerce(spec) normalizes the forms accepted by the builder:
      • int         → returned unchanged (an exact count, not a range).
      • range       → Arity(start, stop - 1), step must be 1 and non-empty.
      • (low, ...)  → Arity(low), unbounded.
      • (low, high) → Arity(low, high).
      • Arity       → returned unchanged.
    """
    __slots__ = ("low", "high")

    def __init__(self, low, high=None, /):
        if not isinstance(low, int) or isinstance(low, bool) or low < 0:
            raise ValueError("arity lower bound must be a non-negative integer")
        if high is not None:
            if not isinstance(high, int) or isinstance(high, bool) or high < low:
                raise ValueError("arity upper bound must be an integer not lower than the lower bound")
        object.__setattr__(self, "low", low)
        object.__setattr__(self, "high", high)

    def __setattr__(self, name, value, /):
        raise AttributeError("arity is read-only")

    def __contains__(self, count, /):
        return count >= self.low and (self.high is None or count <= self.high)

    def __eq__(self, other, /):
        if not isinstance(other, Arity):
            return NotImplemented
        return (self.low, self.high) == (other.low, other.high)

    def __hash__(self):
        return hash((Arity, self.low, self.high))

    def __repr__(self):
        return f"Arity({self.low!r}, {self.high!r})"

    def __str__(self):
        if self.high is None:
            return f"{self.low}..."
        return f"{self.low}..{self.high}"

    @classmethod
    def coerce(cls, value, /):
        match value:
            case bool():
                raise TypeError("arity must be an integer, a range or a (low, high) pair")
            case int() if value < 0:
                raise ValueError("arity must be a non-negative integer")
            case int() | Arity():
                return value
            case range(step=1) if len(value):
                return cls(value.start, value.stop - 1)
            case range():
                raise ValueError("arity range must be non-empty with a step of 1")
            case (low, builtins.Ellipsis | None):
                return cls(low)
            case (low, high):
                return cls(low, high)
        raise TypeError("arity must be an integer, a range or a (low, high) pair")


def wrap(prefix, values, /, *, separator=" ", limit=80):
    """
    Lay out values after a prefix, wrapping to lines of at most `limit` characters.

    Continuation lines are indented by the prefix width so values line up
    under the first one. A value longer than the limit still gets its own line.

    Returns
    - list[str]: the rendered lines (no trailing newlines).

    Example
        wrap("Foo:", ["bar", "baz", "quux", "options"], limit=17)
        -> ["Foo: bar baz quux", "     options"]
    """
    line = [prefix]
    lines = [line]
    length = width = len(prefix)
    indent = " " * width

    for value in map(str, values):
        if len(separator) + length + len(value) > limit:
            line = [indent, separator, value]
            lines.append(line)
            length = width
        else:
            line += [separator, value]
        length += len(separator) + len(value)

    return ["".join(line) for line in lines]


__all__ = (
    "UnsetType",
    "Unset",
    "rename",
    "Arity",
    "wrap",
)
