"""
Translate hg lines from the command line (or stdin) and show the result.

    python -m mercurius "hg book -r C3 feature" "hg status"
"""
import shlex
import sys

from rich.console import Console
from rich.pretty import pprint

from . import Translator

console = Console()


class Echo:
    """stand-in engine: prints direct effects instead of mutating a graph"""

    def hg_rebase(self, destination, base):
        console.print(f"[bold]engine[/bold] hg_rebase(destination={destination!r}, base={base!r})")


def main(lines):
    translator = Translator(Echo(), shell=True, fancy=True, colorful=True, deferred=True)
    status = 0
    for line in lines:
        if not (line := line.strip()):
            continue
        translation = translator.translate(line)
        if not translation.ok:
            status = 1
            continue
        if (tokens := translation.canonical()) is not None:
            console.print(shlex.join(tokens))
        pprint(translation.invocation)
    return status


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:] or sys.stdin.readlines()))
