__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'mercurius'
__author__ = 'Mercurius contributors'
__license__ = 'MIT'
__version__ = "0.1.0"

# Library logging: handlers are the host application's business.
__import__("logging").getLogger(__name__).addHandler(__import__("logging").NullHandler())

from . import arguments, commands, faults, mercurial
from .arguments import *
from .commands import *
from .faults import *
from .mercurial import *

VersionInfo = __import__("collections").namedtuple(
    "VersionInfo",
    ("major", "minor", "micro", "releaselevel", "serial", "metadata"),
)

version_info = VersionInfo(*map(int, __version__.split(".")), "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
)

# Public API of every layer, hg dialect included
for _module in (arguments, commands, faults, mercurial):
    __all__ += _module.__all__
del _module
