"""
hg dialect behavioral tests (one class per definition family).

Scope
- Validate every definition of the registry end to end through a Translator:
  descriptors, rewritten invocations, advisories and terminal faults.
- Validate the direct rebase handler against a recording engine (the engine is
  only reached once every check passed).

Conventions
- Test method names follow CamelCase per project convention.
- Translators run in non-shell mode, so faults are raised and advisories go
  through the warnings machinery.
"""

from __future__ import annotations

import unittest
import warnings
from unittest import TestCase

from mercurius import Descriptor, Translator
from mercurius.faults import (
    ArgumentCountError,
    IncompatibleOptionsError,
    IneffectiveOptionWarning,
    MissingRequiredOptionError,
    UnsupportedOperationError,
)


class Recorder:
    """engine double recording direct calls"""

    def __init__(self):
        self.calls = []

    def hg_rebase(self, destination, base):
        self.calls.append((destination, base))


class DialectTestCase(TestCase):

    def setUp(self):
        self.engine = Recorder()
        self.translator = Translator(self.engine)

    def translate(self, line):
        return self.translator.translate(line)


class TestCommit(DialectTestCase):

    def testCommitDelegates(self):
        translation = self.translate('hg commit -m "first change"')
        self.assertEqual(translation.descriptor, Descriptor("git", "commit"))
        self.assertEqual(translation.invocation.options, {"-m": ["first change"]})
        self.assertEqual(translation.warnings, ())

    def testAddRemoveFlagWarns(self):
        with self.assertWarns(IneffectiveOptionWarning) as context:
            translation = self.translate("hg commit -m -A")
        self.assertTrue(translation.ok)
        self.assertEqual(translation.descriptor.name, "commit")
        self.assertEqual(len(translation.warnings), 1)
        self.assertEqual(translation.warnings[0].key, "hg-a-option")
        self.assertEqual(str(context.warning), "The -A option is not needed for this app, just commit away!")

    def testAmendAlias(self):
        translation = self.translate("hg ci --amend")
        self.assertEqual(translation.invocation.word, "ci")
        self.assertEqual(translation.canonical(), ["git", "commit", "--amend"])


class TestStatus(DialectTestCase):

    def testStatusUnsupported(self):
        for line in ("hg status", "hg st", "hg status  "):
            with self.subTest(line=line):
                with self.assertRaises(UnsupportedOperationError) as context:
                    self.translate(line)
                self.assertEqual(context.exception.key, "hg-error-no-status")
                self.assertEqual(context.exception.kind, "unsupported operation")
        self.assertEqual(self.engine.calls, [])


class TestExport(DialectTestCase):

    def testExportMapsPlaceholder(self):
        translation = self.translate("hg export .")
        self.assertEqual(translation.canonical(), ["git", "show", "HEAD"])

    def testExportRevision(self):
        self.assertEqual(self.translate("hg export C2").canonical(), ["git", "show", "C2"])


class TestGraft(DialectTestCase):

    def testGraftMovesRevisionsToArguments(self):
        translation = self.translate("hg graft -r C2 C3")
        self.assertEqual(translation.descriptor, Descriptor("git", "cherrypick"))
        self.assertEqual(translation.invocation.args, ["C2", "C3"])

    def testGraftRequiresRevisions(self):
        with self.assertRaises(MissingRequiredOptionError) as context:
            self.translate("hg graft C2")
        self.assertEqual(context.exception.key, "git-error-options")


class TestLog(DialectTestCase):

    def testLogWithoutFollowFails(self):
        with self.assertRaises(MissingRequiredOptionError) as context:
            self.translate("hg log")
        self.assertEqual(context.exception.key, "hg-error-log-no-follow")

    def testLogRejectsGeneralArguments(self):
        with self.assertRaises(ArgumentCountError):
            self.translate("hg log C1 -f")

    def testLogFollow(self):
        translation = self.translate("hg log -f .")
        self.assertEqual(translation.canonical(), ["git", "log", "-f", "HEAD"])
        self.assertFalse(translation.counted)


class TestBookmark(DialectTestCase):

    def testListing(self):
        translation = self.translate("hg bookmarks")
        self.assertEqual(translation.descriptor, Descriptor("git", "branch"))
        self.assertEqual(translation.invocation.options, {})
        self.assertEqual(translation.invocation.args, [])

    def testPositionalNameChecksOut(self):
        translation = self.translate("hg bookmark feature C3")
        self.assertEqual(translation.descriptor, Descriptor("git", "checkout"))
        self.assertEqual(translation.invocation.options, {"-b": ["feature"]})
        self.assertEqual(translation.invocation.args, [])

    def testDeleteBecomesForceDelete(self):
        translation = self.translate("hg bookmark -d oldname")
        self.assertEqual(translation.descriptor, Descriptor("git", "branch"))
        self.assertEqual(translation.invocation.options, {"-D": ["oldname"]})
        self.assertEqual(translation.canonical(), ["git", "branch", "-D", "oldname"])

    def testRevisionSwapsArgumentOrder(self):
        translation = self.translate("hg book -r C3 feature")
        self.assertEqual(translation.descriptor, Descriptor("git", "branch"))
        self.assertEqual(translation.invocation.args, ["feature", "C3"])

    def testRevisionWithoutNameKeepsSlots(self):
        translation = self.translate("hg book -r C3")
        self.assertEqual(translation.invocation.args, ["", "C3"])

    def testRenameWithoutArgumentsPassesThrough(self):
        translation = self.translate("hg bookmark -m old new")
        self.assertEqual(translation.descriptor, Descriptor("git", "branch"))
        self.assertEqual(translation.invocation.options, {"-m": ["old", "new"]})

    def testDeleteAndRevisionAlwaysIncompatible(self):
        for line in (
                "hg bookmark -d a -r b",
                "hg bookmark -r b -d a",
                "hg bookmark -d -r",
                "hg book x -r C1 -d",
        ):
            with self.subTest(line=line):
                with self.assertRaises(IncompatibleOptionsError):
                    self.translate(line)

    def testRenameIncompatibilities(self):
        for line in ("hg bookmark -m a -d b", "hg bookmark -m a -r b"):
            with self.subTest(line=line):
                with self.assertRaises(IncompatibleOptionsError):
                    self.translate(line)


class TestRebase(DialectTestCase):

    def testDefaultBaseIsCurrentPosition(self):
        translation = self.translate("hg rebase -d C2")
        self.assertTrue(translation.ok)
        self.assertIsNone(translation.descriptor)
        self.assertEqual(self.engine.calls, [("C2", "HEAD")])

    def testExplicitBase(self):
        self.translate("hg rebase -b C4 -d C2")
        self.assertEqual(self.engine.calls, [("C2", "C4")])

    def testPlaceholderDestination(self):
        self.translate("hg rebase -d . -b C1")
        self.assertEqual(self.engine.calls, [("HEAD", "C1")])

    def testEmptyBaseDefaults(self):
        self.translate("hg rebase -b -d C2")
        self.assertEqual(self.engine.calls, [("C2", "HEAD")])

    def testFailuresLeaveEngineUntouched(self):
        for line, fault in (
                ("hg rebase", MissingRequiredOptionError),
                ("hg rebase -s C3", MissingRequiredOptionError),
                ("hg rebase -d", MissingRequiredOptionError),
                ("hg rebase -d C2 -s C3", IncompatibleOptionsError),
        ):
            with self.subTest(line=line):
                with self.assertRaises(fault):
                    self.translate(line)
        self.assertEqual(self.engine.calls, [])


class TestHistedit(DialectTestCase):

    def testSingleRevision(self):
        translation = self.translate("hg histedit C1")
        self.assertEqual(translation.descriptor, Descriptor("git", "rebase"))
        self.assertEqual(translation.invocation.options, {"-i": ["C1"]})
        self.assertEqual(translation.invocation.args, [])

    def testArgumentCount(self):
        for line in ("hg histedit", "hg histedit a b"):
            with self.subTest(line=line):
                with self.assertRaises(ArgumentCountError):
                    self.translate(line)


class TestPlainDelegates(DialectTestCase):

    def testDelegations(self):
        for line, name, args in (
                ("hg update C1", "checkout", ["C1"]),
                ("hg up", "checkout", []),
                ("hg backout C3", "revert", ["C3"]),
                ("hg pull", "pull", []),
                ("hg summary", "branch", []),
                ("hg sum", "branch", []),
        ):
            with self.subTest(line=line):
                translation = self.translate(line)
                self.assertEqual(translation.descriptor, Descriptor("git", name))
                self.assertEqual(translation.invocation.args, args)

    def testNoAdvisoriesOnPlainDelegates(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            self.assertTrue(self.translate("hg pull").ok)


if __name__ == "__main__":
    unittest.main()
