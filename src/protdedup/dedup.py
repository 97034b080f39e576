#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Remove redundant miniprot alignments, keeping one per locus.

Default outputs:
- GFF3 → **stdout** (unless --out-gff3 PATH is provided)
- TSV  → not written (unless --out-tsv PATH, or '-' for stderr)

Hits on each sequence are grouped by chained genomic span, split into loci
by exon overlap (shared coding length >= 50% of either hit), and the hit with
the highest match score (aligned AA length x identity) is kept per locus.
Accepted records are re-emitted unchanged, ``##PAF`` header lines included.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

import pandas as pd

from protdedup._version import __version__
from protdedup.gff import read_hits, read_lines, write_accepted_gff
from protdedup.models import HitDecision
from protdedup.pipeline import decide

TSV_COLS = [
    'id',
    'chromosome',
    'start',
    'end',
    'strand',
    'rank',
    'identity',
    'match_score',
    'n_exons',
    'group',
    'cluster',
    'accepted',
    'note',
]


def configure_logging(level: str = 'INFO') -> None:
    """
    Configure root logger with a standard format (logs to stderr).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(message)s',
        stream=sys.stderr,
    )


def decisions_to_frame(decisions: Sequence[HitDecision]) -> pd.DataFrame:
    """One row per hit with its footprint group, cluster and outcome."""
    rows = [
        {
            'id': d.hit.id,
            'chromosome': d.hit.chromosome,
            'start': d.hit.start,
            'end': d.hit.end,
            'strand': d.hit.strand,
            'rank': d.hit.rank,
            'identity': d.hit.identity,
            'match_score': d.hit.match_score,
            'n_exons': len(d.hit.exons),
            'group': d.group,
            'cluster': d.cluster,
            'accepted': d.accepted,
            'note': d.hit.note,
        }
        for d in decisions
    ]
    return pd.DataFrame(rows, columns=TSV_COLS)


def build_arg_parser() -> argparse.ArgumentParser:
    """
    Build the command-line interface parser.
    """
    ap = argparse.ArgumentParser(
        description=(
            'Keep one miniprot alignment per locus from a GFF3. '
            f'Version {__version__}'
        )
    )
    ap.add_argument(
        'gff',
        nargs='?',
        default='-',
        help="miniprot GFF3 path or '-' for stdin (default: '-')",
    )
    ap.add_argument(
        '--min-identity',
        type=float,
        default=0.0,
        help='Drop hits below this percent identity before clustering (default: 0)',
    )
    ap.add_argument(
        '--min-match',
        type=float,
        default=0.0,
        help='Drop hits below this match score (aligned AA x identity/100) (default: 0)',
    )
    ap.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Worker processes, one sequence at a time each (default: 1)',
    )
    ap.add_argument(
        '--out-gff3',
        default='-',
        help="Output GFF3 path (default: '-' = stdout)",
    )
    ap.add_argument(
        '--out-tsv',
        default=None,
        help="Per-hit cluster report path; '-' writes it to stderr (default: none)",
    )
    ap.add_argument(
        '--log-level',
        default='INFO',
        help='Logging level (DEBUG, INFO, WARNING, ERROR; default: INFO)',
    )
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    CLI entrypoint.

    Returns
    -------
    int
        Exit status code.
    """
    ap = build_arg_parser()
    args = ap.parse_args(argv)
    if args.workers < 1:
        ap.error('--workers must be >= 1')

    configure_logging(args.log_level)
    logging.info('protdedup version %s', __version__)
    logging.info('Reading input: %s', args.gff)

    lines: List[str] = read_lines(args.gff)
    hits = read_hits(lines, args.min_identity, args.min_match)
    logging.info('Clustering %d hits', len(hits))

    decisions = decide(hits, workers=args.workers)
    accepted = {d.hit.id for d in decisions if d.accepted}
    logging.info('Kept %d of %d hits', len(accepted), len(hits))

    if args.out_tsv:
        frame = decisions_to_frame(decisions)
        if args.out_tsv == '-':
            frame.to_csv(sys.stderr, sep='\t', index=False)
            logging.info('Wrote TSV report to stderr')
        else:
            frame.to_csv(args.out_tsv, sep='\t', index=False)
            logging.info('Wrote TSV report: %s', args.out_tsv)

    write_accepted_gff(args.out_gff3, lines, accepted)
    if args.out_gff3 and args.out_gff3 != '-':
        logging.info('Wrote deduplicated GFF3: %s', args.out_gff3)
    else:
        logging.info('Wrote deduplicated GFF3 to stdout')

    return 0


if __name__ == '__main__':
    try:
        raise SystemExit(main())
    except BrokenPipeError:
        # allow piping into head/tail without noisy tracebacks
        try:
            sys.stderr.close()
        except Exception:
            pass
        try:
            sys.stdout.close()
        except Exception:
            pass
        raise
