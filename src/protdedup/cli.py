#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command-line front door for protdedup.

``protdedup <tool> [options]`` looks up ``<tool>`` in ``TOOLS``, imports the
module that implements it and hands every remaining argument to that
module's ``main(argv)``. Each tool owns its own options and ``--help``.

    miniprot --gff genome.mpi proteins.faa > aln.gff3
    protdedup dedup aln.gff3 --min-identity 50 --out-tsv clusters.tsv > best.gff3
"""

from __future__ import annotations

import argparse
import importlib
import sys
from typing import Callable, Dict, Optional, Sequence, Tuple

from protdedup._version import __version__

# tool name -> (implementing module, one-line summary)
TOOLS: Dict[str, Tuple[str, str]] = {
    'dedup': (
        'protdedup.dedup',
        'Keep the best-scoring alignment per locus and emit GFF3.',
    ),
}


def resolve_tool(name: str) -> Callable[[Sequence[str]], int]:
    """
    Return the ``main`` function of the module registered for ``name``.

    Raises
    ------
    ImportError
        If the module (or one of its dependencies) cannot be imported.
    TypeError
        If the module has no callable ``main``.
    """
    module = importlib.import_module(TOOLS[name][0])
    tool_main = getattr(module, 'main', None)
    if not callable(tool_main):
        raise TypeError(f'{module.__name__} has no callable main(argv)')
    return tool_main


def build_parser() -> argparse.ArgumentParser:
    """Parser that only recognises the tool name; the rest is passed through."""
    parser = argparse.ArgumentParser(
        prog='protdedup',
        description='Deduplicate protein-to-genome alignments.',
        epilog="Run 'protdedup <tool> --help' for the options of a tool.",
    )
    parser.add_argument(
        '--version', action='version', version=f'protdedup {__version__}'
    )
    tools = parser.add_subparsers(
        dest='command',
        metavar='{' + ','.join(TOOLS) + '}',
        required=True,
        help='Tool to run',
    )
    for name, (_module, summary) in TOOLS.items():
        tools.add_parser(name, help=summary, add_help=False)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Dispatch to the selected tool; 2 if it cannot be loaded."""
    if argv is None:
        argv = sys.argv[1:]

    args, remainder = build_parser().parse_known_args(argv)
    try:
        tool_main = resolve_tool(args.command)
    except (ImportError, TypeError) as e:
        print(f'protdedup: cannot load {args.command!r}: {e}', file=sys.stderr)
        return 2
    return int(tool_main(remainder))


if __name__ == '__main__':
    raise SystemExit(main())
