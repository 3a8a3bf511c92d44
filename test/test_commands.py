"""
Command dispatch tests (argv walking, post dispatch, options, failures).

Scope
- Dispatch order of hooks and actions through nested subcommands.
- Post subcommands dispatched from inside a running action, with post options.
- Options at every level, flat and nested under option keys.
- Arity validation and failure messages, without running the action.
- Help text of commands, and the same behavior once the tree is frozen.

Conventions
- Test method names follow CamelCase per project convention.
- The shared tree lives in sample.py; the frozen suite reruns the dispatch
  tests against a frozen copy.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argtree import processor, Command, CommandExit, CommandFailure, ProgramBug, Arity

from sample import Context, ROOT_HELP, build


class TestDispatch(TestCase):
    """Dispatch behavior shared by mutable and frozen trees."""

    frozen = False

    def setUp(self) -> None:
        self.app = build(frozen=self.frozen)

    def testActionsRunInOrder(self):
        self.assertEqual(self.app.process([]), ["top", "empty"])
        self.assertEqual(self.app.process(["a", "b", "1"]), ["top", "before_a", "before_b", ("b", ["1"], {"a": {}, "b": {}})])
        self.assertEqual(self.app.process(["a", "b", "1", "2"]), ["top", "before_a", "before_b", ("b", ["1", "2"], {"a": {}, "b": {}})])
        self.assertEqual(self.app.process(["a", "3", "4"]), ["top", "before_a", ("a", "3", "4")])
        self.assertEqual(self.app.process(["c"]), ["top", "c"])
        self.assertEqual(self.app.process(["d", "5"]), ["top", ("d", "5")])
        self.assertEqual(self.app.process(["e", "f"]), ["top", "f"])

    def testPostSubcommands(self):
        self.assertEqual(self.app.process(["g", "j"]), ["top", "j"])
        self.assertEqual(self.app.process(["g", "1", "h"]), ["top", ("g", "1"), ("h", None, None)])
        self.assertEqual(self.app.process(["g", "1", "i"]), ["top", ("g", "1"), None, None, "i"])
        self.assertEqual(self.app.process(["g", "1", "i", "k"]), ["top", ("g", "1"), None, None, "k"])

    def testPostOptions(self):
        self.assertEqual(self.app.process(["g", "1", "-v", "h"]), ["top", ("g", "1"), ("h", True, None)])
        self.assertEqual(self.app.process(["g", "1", "-v", "i"]), ["top", ("g", "1"), True, None, "i"])
        self.assertEqual(self.app.process(["g", "1", "-v", "i", "k"]), ["top", ("g", "1"), True, None, "k"])
        self.assertEqual(self.app.process(["g", "1", "-k", "2", "h"]), ["top", ("g", "1"), ("h", None, "2")])
        self.assertEqual(self.app.process(["g", "1", "--key=2", "i"]), ["top", ("g", "1"), None, "2", "i"])
        self.assertEqual(self.app.process(["g", "1", "-k", "2", "i", "k"]), ["top", ("g", "1"), None, "2", "k"])

    def testSkipOptionParsing(self):
        self.assertEqual(self.app.process(["l", "-A", "1", "b"]), ["top", ("l", ["-A", "1", "b"])])

    def testInvalidPostSubcommand(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["g", "1", "l"])
        self.assertEqual(caught.exception.message, "invalid post subcommand: l")

    def testMissingPostSubcommand(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["g", "1"])
        self.assertEqual(caught.exception.message, "no post subcommand provided")

    def testOptionsAtEveryLevel(self):
        self.assertEqual(
            self.app.process(["-v", "a", "b", "-v", "1", "2"]),
            ["top", "before_a", "before_b", ("b", ["1", "2"], {"a": {}, "b": {"v": True}, "v": True})],
        )
        self.assertEqual(
            self.app.process(["a", "-v", "b", "1", "2"]),
            ["top", "before_a", "before_b", ("b", ["1", "2"], {"a": {"v": True}, "b": {}})],
        )

    def testOptionTerminator(self):
        self.assertEqual(self.app.process(["a", "b", "--", "-v"]), ["top", "before_a", "before_b", ("b", ["-v"], {"a": {}, "b": {}})])

    def testUnexpectedPostOption(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["g", "1", "-b", "h"])
        self.assertEqual(caught.exception.message, "invalid option: -b")

    def testHaltRaisesCommandExit(self):
        with self.assertRaises(CommandExit) as caught:
            self.app.process(["--version"])
        self.assertEqual(caught.exception.message, "0.0.0")
        self.assertFalse(caught.exception.failure)

        with self.assertRaises(CommandExit) as caught:
            self.app.process(["--help"])
        self.assertEqual(caught.exception.message, ROOT_HELP)

    def testFailureFlag(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["--bad"])
        self.assertTrue(caught.exception.failure)

    def testMessageWithUsage(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["--bad"])
        self.assertEqual(caught.exception.message_with_usage, "invalid option: --bad\n\n" + ROOT_HELP)

    def testSubcommandLookup(self):
        self.assertEqual(self.app.root.subcommand("d").path, ("d",))
        self.assertEqual(self.app.root.subcommand("g").post_subcommand("h").path, ("g", "h"))
        self.assertIsNone(self.app.root.subcommand("h"))
        self.assertIsNone(self.app.root.subcommand("g").post_subcommand("j"))

    def testArgvIsNotModified(self):
        argv = ["a", "b", "1"]
        self.app.process(argv)
        self.assertEqual(argv, ["a", "b", "1"])


class TestFrozenDispatch(TestDispatch):
    """The same dispatch behavior, on a frozen tree."""

    frozen = True


class TestFailures(TestCase):
    """Failures raised before actions run, observed through a shared context."""

    def setUp(self) -> None:
        self.res = res = Context()
        self.app = build()
        self.app.context = lambda: res

    def assertFailure(self, argv, message, res):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(argv)
        self.assertEqual(caught.exception.message, message)
        self.assertEqual(self.res, res)
        self.res.clear()

    def testInvalidNumberOfArguments(self):
        self.assertFailure(["6"], "invalid number of arguments for command (accepts: 0, given: 1)", [])
        self.assertFailure(["a", "b"], "invalid number of arguments for a b subcommand (accepts: 1..., given: 0)", ["top", "before_a"])
        self.assertFailure(["a"], "invalid arguments for a subcommand (accepts: x y)", ["top"])
        self.assertFailure(["a", "1"], "invalid arguments for a subcommand (accepts: x y)", ["top"])
        self.assertFailure(["a", "1", "2", "3"], "invalid arguments for a subcommand (accepts: x y)", ["top"])
        self.assertFailure(["c", "1"], "invalid number of arguments for c subcommand (accepts: 0, given: 1)", ["top"])
        self.assertFailure(["d"], "invalid number of arguments for d subcommand (accepts: 1, given: 0)", ["top"])
        self.assertFailure(["d", "1", "2"], "invalid number of arguments for d subcommand (accepts: 1, given: 2)", ["top"])
        self.assertFailure(["l", "m"], "no subcommand provided", ["top", ("m", "after_options")])
        self.assertFailure(
            ["l", "m", "n", "1"],
            "invalid number of arguments for l m n subcommand (accepts: 0, given: 1)",
            ["top", ("m", "after_options"), ("mb", "before")],
        )

    def testMissingSubcommand(self):
        self.assertFailure(["e"], "no subcommand provided", ["top"])

    def testInvalidSubcommand(self):
        self.assertFailure(["e", "g"], "invalid subcommand: g", ["top"])

        app = processor(Context, lambda command: command.on("f", None))
        with self.assertRaises(CommandFailure) as caught:
            app.process(["g"])
        self.assertEqual(caught.exception.message, "invalid subcommand: g")
        self.assertNotIsInstance(caught.exception, ProgramBug)

    def testUnexpectedOptions(self):
        self.assertFailure(["-d"], "invalid option: -d", [])
        self.assertFailure(["a", "-d"], "invalid option: -d", ["top"])
        self.assertFailure(["a", "b", "-d"], "invalid option: -d", ["top", "before_a"])
        self.assertFailure(["d", "-d", "1", "2"], "invalid option: -d", ["top"])

    def testMissingOptionValue(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["g", "1", "--key"])
        self.assertTrue(caught.exception.message.startswith("--key option requires"))
        self.assertIs(caught.exception.command, self.app.locate("g"))
        self.assertEqual(self.res, ["top", ("g", "1")])

    def testFailureIsAttributedToCommand(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["a", "b"])
        self.assertIs(caught.exception.command, self.app.locate("a", "b"))

    def testNoRunBlockOrSubcommands(self):
        app = processor(Context, lambda command: None)
        with self.assertRaises(ProgramBug) as caught:
            app.process([])
        self.assertEqual(caught.exception.message, "program bug, no run block or subcommands defined for command")

        app = processor(Context, lambda command: command.on("f", None))
        with self.assertRaises(ProgramBug) as caught:
            app.process(["f"])
        self.assertEqual(caught.exception.message, "program bug, no run block or subcommands defined for f subcommand")

        # a token is no excuse for an empty command
        with self.assertRaises(ProgramBug):
            app.process(["f", "x"])

    def testNoPostSubcommands(self):
        @processor(Context)
        def app(command):
            @command.run
            def run(context, command):
                return command.run(context, {}, [])

        with self.assertRaises(ProgramBug) as caught:
            app.process([])
        self.assertEqual(caught.exception.message, "program bug, no run block or post subcommands defined for command")

    def testMessageWithUsageWithoutHelp(self):
        app = processor(Context, lambda command: command.run(lambda context: None))
        with self.assertRaises(CommandFailure) as caught:
            app.process(["--bad"])
        self.assertEqual(caught.exception.message_with_usage, "invalid option: --bad")

    def testMessageWithUsageWithoutCommand(self):
        self.assertEqual(CommandFailure("foo").message_with_usage, "foo")


class TestDefinitions(TestCase):
    """Commands defined or redefined after the processor was built."""

    def setUp(self) -> None:
        self.res = res = Context()
        self.app = build()
        self.app.context = lambda: res

    def testAddSubcommandsAfterInitialization(self):
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["z"])
        self.assertEqual(caught.exception.message, "invalid number of arguments for command (accepts: 0, given: 1)")
        self.assertEqual(self.res, [])

        @self.app.on("z")
        def z(command):
            command.args(1)

            @command.run
            def run(context, arg):
                return context.push(("z", arg))

        self.assertEqual(self.app.process(["z", "h"]), ["top", ("z", "h")])
        self.res.clear()

        @self.app.on("z", "y")
        def y(command):
            command.run(lambda context: context.push("y"))

        self.assertEqual(self.app.process(["z", "y"]), ["top", "y"])
        self.res.clear()

        @self.app.command("z", "y", "x", args=1)
        def x(context, arg):
            return context.push(("x", arg))

        self.assertEqual(self.app.process(["z", "y", "x", "j"]), ["top", ("x", "j")])

    def testRangeArityForms(self):
        @self.app.command("r", args=range(1, 3))
        def r(context, args):
            return context.push(("r", args))

        self.assertEqual(self.app.locate("r").num_args, Arity(1, 2))
        self.assertEqual(self.app.process(["r", "1", "2"]), ["top", ("r", ["1", "2"])])
        self.res.clear()
        with self.assertRaises(CommandFailure) as caught:
            self.app.process(["r", "1", "2", "3"])
        self.assertEqual(caught.exception.message, "invalid number of arguments for r subcommand (accepts: 1..2, given: 3)")

    def testActionKeywords(self):
        received = {}

        @self.app.command("kw", args=1)
        def kw(context, arg, **keywords):
            received.update(keywords, arg=arg)

        self.app.process(["-v", "kw", "x"])
        self.assertEqual(received["arg"], "x")
        self.assertEqual(received["options"], {"v": True})
        self.assertIsInstance(received["command"], Command)
        self.assertEqual(received["command"].path, ("kw",))

        # positional parameters named like the keywords take the arguments
        @self.app.command("help", args=1)
        def help_(context, command):
            return context.push(("help", command))

        @self.app.command("set", args=1)
        def set_(context, options):
            return context.push(("set", options))

        @self.app.command("all", args=(1, ...))
        def all_(context, options, command):
            return context.push(("all", options, command.path))

        self.res.clear()
        self.assertEqual(self.app.process(["help", "add"]), ["top", ("help", "add")])
        self.res.clear()
        self.assertEqual(self.app.process(["set", "x"]), ["top", ("set", "x")])
        self.res.clear()
        self.assertEqual(self.app.process(["all", "x", "y"]), ["top", ("all", ["x", "y"], ("all",))])

    def testFlatOptionsAreOverwritten(self):
        def define(parser):
            parser.on("-v")
            parser.on("--key=X")

        @processor(Context)
        def app(command):
            command.options("tool [options] sub", define)

            @command.on("sub")
            def sub(command):
                command.options("tool sub [options]", define)
                command.run(lambda context, options: context.push(dict(options)))

        self.assertEqual(app.process(["--key=1", "-v", "sub", "--key=2"]), [{"key": "2", "v": True}])
        self.assertEqual(app.process(["--key=1", "sub", "-v"]), [{"key": "1", "v": True}])

    def testReusedOptionKeyIsOverwritten(self):
        @processor(Context)
        def app(command):
            command.options("tool [options] sub", lambda parser: parser.on("-v"), key="x")

            @command.on("sub")
            def sub(command):
                command.options("tool sub [options]", lambda parser: parser.on("--key=X"), key="x")
                command.run(lambda context, options: context.push(dict(options)))

        self.assertEqual(app.process(["-v", "sub", "--key=2"]), [{"x": {"key": "2"}}])
        self.assertEqual(app.process(["-v", "sub"]), [{"x": {}}])

    def testDescriptionsInHelp(self):
        @self.app.on("z")
        def z(command):
            command.desc("Trivial Example")
            command.banner("example z command")
            command.post_banner("example z arg post-command")
            for name in "abcdefg":
                command.command(name, lambda context: None)

            @command.on("d")
            def d(command):
                command.desc("D-DESC")

            @command.post_on("h1")
            def h1(command):
                command.desc("H1-DESC")
                command.run(lambda context: None)

        self.assertEqual(self.app.root.subcommand("z").help(), "\n".join([
            "Trivial Example",
            "",
            "Usage:",
            "    example z command",
            "    example z arg post-command",
            "",
            "Commands:",
            "    a",
            "    b",
            "    c",
            "    d     D-DESC",
            "    e",
            "    f",
            "    g",
            "",
            "Post Commands:",
            "    h1    H1-DESC",
            "",
        ]))

    def testLocate(self):
        self.assertIs(self.app.locate(), self.app.root)
        self.assertEqual(self.app.locate("g", "i", "k").path, ("g", "i", "k"))
        with self.assertRaises(KeyError):
            self.app.locate("a", "nope")


if __name__ == "__main__":
    unittest.main()
