"""
The hg dialect: every hg command the tutorial accepts and how it maps onto git.

Definitions are declared in matching order and collected into REGISTRY at
import time. Each one encodes a single piece of dialect policy; most delegate
to a git command after adjusting the invocation, rebase acts directly on the
engine.

Notes
- Presence of a flag is tested with `in` (a flag given without values maps to []).
- hg and git disagree on argument order for "bookmark at revision" and on the
  spelling of the current position ('.' vs 'HEAD'); both are handled here.
"""
import logging

from .arguments import PLACEHOLDER
from .commands import Descriptor, Registry, delegate, execute
from .faults import *

logger = logging.getLogger(__name__)

VCS = "git"


@delegate("commit", r"^hg +(commit|ci)($|\s)", ("--amend", "-A", "-m"))
def commit(engine, invocation):
    """record changes (-A is accepted but has no effect)"""
    if invocation.has("-A"):
        invocation.warn("hg-a-option", IneffectiveOptionWarning, option="-A")
    return Descriptor(VCS, "commit")


@execute("status", r"^hg +(status|st) *$", uncounted=True)
def status(engine, invocation):
    """not available: there is no staging area in the simulated repository"""
    invocation.fail(UnsupportedOperationError, "hg-error-no-status")


@delegate("export", r"^hg +export($|\s)", uncounted=True)
def export(engine, invocation):
    """show a changeset"""
    invocation.mapdot()
    return Descriptor(VCS, "show")


@delegate("graft", r"^hg +graft($|\s)", ("-r",))
def graft(engine, invocation):
    """copy the revisions given with -r onto the current position"""
    invocation.require("-r", "git-error-options")
    invocation.setargs(invocation.options["-r"])
    return Descriptor(VCS, "cherrypick")


@delegate("log", r"^hg +log($|\s)", ("-f",), uncounted=True)
def log(engine, invocation):
    """show history (only the following form, -f, is supported)"""
    invocation.noargs()
    invocation.require("-f", "hg-error-log-no-follow")
    invocation.mapdot()
    return Descriptor(VCS, "log")


@delegate("bookmark", r"^hg (bookmarks|bookmark|book)($|\s)", ("-r", "-f", "-d", "-m"))
def bookmark(engine, invocation):
    """list, create, move, rename or delete bookmarks"""
    invocation.exclusive("-m", "-d")
    invocation.exclusive("-d", "-r")
    invocation.exclusive("-m", "-r")

    options = invocation.options
    args = invocation.args

    if len(args) + len(options.get("-r", ())) + len(options.get("-d", ())) == 0:
        # list bookmarks, or rename when -m carries the names
        return Descriptor(VCS, "branch")

    if "-d" in options:
        options["-D"] = options.pop("-d")
        invocation.setoptions(options)
        return Descriptor(VCS, "branch")

    if "-r" in options:
        # hg takes (revision, name), git branch takes (name, revision)
        revisions = options["-r"]
        rev = revisions[0] if revisions else ""
        name = revisions[1] if len(revisions) > 1 else ""
        invocation.setargs([name, rev])
        return Descriptor(VCS, "branch")

    if args:
        invocation.setoptions({"-b": [args[0]]})
        invocation.setargs([])
        return Descriptor(VCS, "checkout")

    return Descriptor(VCS, "branch")


@execute("rebase", r"^hg +rebase($|\s+)", ("-d", "-s", "-b"))
def rebase(engine, invocation):
    """move the changesets of a base (-b, defaults to '.') onto a destination (-d)"""
    if invocation.has("-d") and invocation.has("-s"):
        invocation.fail(IncompatibleOptionsError, "option-incompatible", first="-d", second="-s")
    # -s alone has no engine counterpart
    invocation.require("-d", "git-error-options")

    options = invocation.options
    if not options.get("-b"):
        options["-b"] = [PLACEHOLDER]
    invocation.setoptions(options)
    invocation.mapdot()

    options = invocation.options
    if not options["-d"]:
        invocation.fail(MissingRequiredOptionError, "git-error-options", option="-d")

    destination = options["-d"][0]
    base = options["-b"][0]
    logger.info("rebasing %s onto %s", base, destination)
    engine.hg_rebase(destination, base)


@delegate("update", r"^hg +(update|up)($|\s+)")
def update(engine, invocation):
    """move the working position"""
    return Descriptor(VCS, "checkout")


@delegate("backout", r"^hg +backout($|\s+)")
def backout(engine, invocation):
    """undo the effects of a changeset with a new one"""
    return Descriptor(VCS, "revert")


@delegate("histedit", r"^hg +histedit($|\s+)")
def histedit(engine, invocation):
    """interactively edit history starting at the given revision"""
    invocation.bounds(1, 1)
    invocation.setoptions({"-i": invocation.args})
    invocation.setargs([])
    return Descriptor(VCS, "rebase")


@delegate("pull", r"^hg +pull($|\s+)")
def pull(engine, invocation):
    """pull changes from the remote"""
    return Descriptor(VCS, "pull")


@delegate("summary", r"^hg +(summary|sum) *$")
def summary(engine, invocation):
    """summarize the repository state"""
    return Descriptor(VCS, "branch")


REGISTRY = Registry(
    commit,
    status,
    export,
    graft,
    log,
    bookmark,
    rebase,
    update,
    backout,
    histedit,
    pull,
    summary,
    prog="hg",
)

# git commands the hg definitions delegate to
CANONICAL = frozenset({
    "commit",
    "show",
    "cherrypick",
    "log",
    "branch",
    "checkout",
    "rebase",
    "revert",
    "pull",
})


__all__ = (
    "VCS",
    "REGISTRY",
    "CANONICAL",
)
