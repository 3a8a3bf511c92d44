"""
Autoload tests (lazy subcommands from directories and packages).

Scope
- Subcommands and post subcommands loaded from a directory of Python files.
- Subcommands loaded from the modules of an importable package.
- Failed loads, resolve-once under concurrency, and freezing.

Conventions
- Test method names follow CamelCase per project convention.
- Fixtures live under autoload/ and autoload_package/ next to this module.
"""

from __future__ import annotations

import os.path
import sys
import unittest
from threading import Thread
from types import MappingProxyType
from unittest import TestCase

import autoload_package
from argtree import Autoload, Command, ProgramBug

from sample import Context, build

HERE = os.path.dirname(os.path.abspath(__file__))


class TestAutoload(TestCase):
    """Lazy subcommands."""

    def setUp(self) -> None:
        self.res = res = Context()
        self.app = build()
        self.app.context = lambda: res

    def define(self, commands=True):
        @self.app.on("k")
        def k(command):
            if commands:
                command.autoload_subcommand_dir(os.path.join(HERE, "autoload", "commands"))
            command.autoload_post_subcommand_dir(os.path.join(HERE, "autoload", "post"))
            command.args((2, ...))

            @command.run
            def run(context, argv, options, command):
                context.push(("k", argv.pop(0)))
                return command.run(context, options, argv)

        return k

    def testReferencesAreLazy(self):
        k = self.define()
        self.assertEqual(list(k.subcommands), ["m", "n"])
        self.assertIsInstance(k.subcommands["m"], Autoload)
        self.assertTrue(k.subcommands["m"].reference.endswith("m.py"))

    def testAutoloadSubcommand(self):
        k = self.define()
        self.assertEqual(self.app.process(["k", "m"]), ["top", "m"])
        self.assertIsInstance(k.subcommands["m"], Command)
        self.assertEqual(k.subcommands["m"].desc, "autoloaded")

    def testAutoloadPostSubcommand(self):
        self.define()
        self.assertEqual(self.app.process(["k", "1", "o"]), ["top", ("k", "1"), "o"])

    def testFailedAutoload(self):
        k = self.define()
        with self.assertRaises(ProgramBug) as caught:
            self.app.process(["k", "n"])
        self.assertEqual(caught.exception.message, "program bug, autoload of subcommand n failed")
        self.assertIs(caught.exception.command, k)

    def testResolveOnce(self):
        k = self.define()
        found = []
        threads = [Thread(target=lambda: found.append(k.subcommand("m"))) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(len(found), 8)
        self.assertTrue(all(command is found[0] for command in found))
        self.assertIsInstance(found[0], Command)

    def testFreezeResolvesEverything(self):
        k = self.define(commands=False)
        self.app.freeze()
        self.assertIsInstance(k.post_subcommands, MappingProxyType)
        self.assertIsInstance(k.post_subcommands["o"], Command)
        self.assertTrue(k.post_subcommands["o"].frozen)
        self.assertEqual(self.app.process(["k", "1", "o"]), ["top", ("k", "1"), "o"])

    def testFreezeFailsOnFailedAutoload(self):
        self.define()
        with self.assertRaises(ProgramBug):
            self.app.freeze()
        # k is defined last: the subcommands before it must stay mutable too
        for path in [("a",), ("a", "b"), ("g", "i", "k"), ("l", "m", "n")]:
            self.assertFalse(self.app.locate(*path).frozen)
        self.assertFalse(self.app.frozen)
        self.assertFalse(self.app.root.option_parser.frozen)
        self.app.locate("a").desc = "still mutable"

    def testLocateAutoloads(self):
        self.define()
        self.assertEqual(self.app.locate("k", "o").path, ("k", "o"))

    def testAutoloadPackage(self):
        autoload_package.processor = self.app
        self.addCleanup(setattr, autoload_package, "processor", None)
        self.addCleanup(sys.modules.pop, "autoload_package.p", None)

        @self.app.on("pkg")
        def pkg(command):
            command.autoload_subcommand_package("autoload_package")

        self.assertIsInstance(pkg.subcommands["p"], Autoload)
        self.assertEqual(self.app.process(["pkg", "p"]), ["top", "p"])


if __name__ == "__main__":
    unittest.main()
