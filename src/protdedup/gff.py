#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Read miniprot GFF3 into alignment hits and write back the accepted records.

Input is miniprot's GFF3 output: optional ``##PAF`` header lines, each
preceding the mRNA it describes, then ``mRNA`` features with ``CDS`` (and
``stop_codon``) children linked by ``Parent``.

mRNA attributes used
--------------------
- ``ID``       : hit id
- ``Rank``     : aligner rank (reported only)
- ``Identity`` : fraction of identical AAs (0-1), stored as a percentage
- ``Target``   : ``<query> <qstart> <qend>``; aligned AA length is
  ``qend - qstart + 1``
"""

from __future__ import annotations

import logging
import sys
from typing import Dict, List, Optional, Sequence, Set, TextIO, Tuple

import pandas as pd

from protdedup.models import AlignmentHit

_MRNA_COLS = [
    'seqid',
    'start',
    'end',
    'strand',
    'mrna_id',
    'rank',
    'identity',
    'qname',
    'aligned_aa',
    'lineno',
]
_CDS_COLS = ['parent', 'start', 'end', 'lineno']


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def read_lines(source: Optional[str]) -> List[str]:
    """
    Read all lines from a file path or stdin."""
    if source == '-' or source is None:
        return sys.stdin.read().splitlines()
    with open(source, 'r', encoding='utf-8') as fh:
        return fh.read().splitlines()


def parse_attrs(field: str) -> Dict[str, str]:
    """Split a GFF3 column-9 string into a dict (tolerant of stray ';')."""
    ad: Dict[str, str] = {}
    for kv in field.strip().split(';'):
        if '=' in kv:
            k, v = kv.split('=', 1)
            ad[k] = v
    return ad


def parse_target(target: str) -> Tuple[str, int]:
    """
    Return (query name, aligned AA length) from a ``Target`` value.

    A value without coordinates yields length 0.
    """
    parts = target.split()
    if not parts:
        return '', 0
    if len(parts) < 3:
        return parts[0], 0
    return parts[0], int(parts[2]) - int(parts[1]) + 1


def read_gff_features(lines: Sequence[str]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Parse mRNA and CDS features from miniprot GFF3 body lines.

    Raises
    ------
    ValueError
        If a feature line has non-integer coordinates or start > end, or an
        mRNA ID repeats.
    """
    mrows: List[Dict[str, object]] = []
    crows: List[Dict[str, object]] = []
    seen_ids: Dict[str, int] = {}
    for lineno, ln in enumerate(lines, start=1):
        if not ln or ln.startswith('#'):
            continue
        parts = ln.split('\t')
        if len(parts) < 9:
            continue
        seqid, _source, ftype, start, end, _score, strand, _phase, attrs = parts[:9]
        if ftype not in ('mRNA', 'CDS'):
            continue
        try:
            start_i, end_i = int(start), int(end)
        except ValueError:
            raise ValueError(
                f'line {lineno}: non-integer coordinates {start!r}..{end!r}'
            ) from None
        if start_i > end_i:
            raise ValueError(f'line {lineno}: start {start_i} > end {end_i}')

        ad = parse_attrs(attrs)
        if ftype == 'mRNA':
            if not ad.get('ID'):
                logging.warning(
                    'line %d: mRNA without ID on %s:%d-%d skipped',
                    lineno,
                    seqid,
                    start_i,
                    end_i,
                )
                continue
            first = seen_ids.setdefault(ad['ID'], lineno)
            if first != lineno:
                raise ValueError(
                    f'line {lineno}: duplicate mRNA ID {ad["ID"]!r} '
                    f'(first seen on line {first})'
                )
            qname, aligned_aa = parse_target(ad.get('Target', ''))
            mrows.append(
                {
                    'seqid': seqid,
                    'start': start_i,
                    'end': end_i,
                    'strand': strand,
                    'mrna_id': ad['ID'],
                    'rank': int(ad.get('Rank', 0)),
                    'identity': round(float(ad.get('Identity', 0)) * 100, 4),
                    'qname': qname,
                    'aligned_aa': aligned_aa,
                    'lineno': lineno,
                }
            )
        else:
            crows.append(
                {
                    'parent': ad.get('Parent'),
                    'start': start_i,
                    'end': end_i,
                    'lineno': lineno,
                }
            )

    mdf = pd.DataFrame(mrows, columns=_MRNA_COLS)
    cdf = pd.DataFrame(crows, columns=_CDS_COLS)
    mdf['match_score'] = mdf['aligned_aa'] * mdf['identity'] / 100
    return mdf, cdf


def apply_thresholds(
    mdf: pd.DataFrame, min_identity: float = 0.0, min_match: float = 0.0
) -> pd.DataFrame:
    """Keep mRNAs with identity (percent) and match score at or above the minima."""
    keep = (mdf['identity'] >= min_identity) & (mdf['match_score'] >= min_match)
    return mdf.loc[keep]


def hits_from_frames(mdf: pd.DataFrame, cdf: pd.DataFrame) -> List[AlignmentHit]:
    """
    Join mRNAs with their CDS parts into ``AlignmentHit`` records.

    mRNAs without CDS parts are dropped with a warning. Input order is kept.

    Raises
    ------
    ValueError
        If a CDS lies outside its mRNA span (reported with the mRNA line).
    """
    exons: Dict[str, List[Tuple[int, int]]] = {}
    for _, c in cdf.iterrows():
        exons.setdefault(str(c['parent']), []).append((int(c['start']), int(c['end'])))

    hits: List[AlignmentHit] = []
    for _, m in mdf.iterrows():
        mrna_id = str(m['mrna_id'])
        parts = exons.get(mrna_id)
        if not parts:
            logging.warning('mRNA %s has no CDS features; dropped', mrna_id)
            continue
        try:
            hit = AlignmentHit.from_alignment(
                id=mrna_id,
                chromosome=str(m['seqid']),
                start=int(m['start']),
                end=int(m['end']),
                strand=str(m['strand']),
                exons=parts,
                aligned_aa=int(m['aligned_aa']),
                identity=float(m['identity']),
                rank=int(m['rank']),
                note=str(m['qname']),
            )
        except ValueError as e:
            raise ValueError(f'line {int(m["lineno"])}: {e}') from e
        hits.append(hit)
    return hits


def read_hits(
    lines: Sequence[str], min_identity: float = 0.0, min_match: float = 0.0
) -> List[AlignmentHit]:
    """
    Parse, threshold and assemble hits from miniprot GFF3 lines.

    An input without mRNA features yields no hits (logged as a warning).
    """
    mdf, cdf = read_gff_features(lines)
    if mdf.empty:
        logging.warning(
            'No mRNA features found; expected miniprot GFF3 output (--gff).'
        )
        return []
    logging.info('GFF mRNAs: %d; CDS parts: %d', len(mdf), len(cdf))
    passed = apply_thresholds(mdf, min_identity, min_match)
    logging.info(
        'Thresholds identity>=%.2f match>=%.2f: %d of %d mRNAs pass',
        min_identity,
        min_match,
        len(passed),
        len(mdf),
    )
    return hits_from_frames(passed, cdf)


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _open_out_handle(path: Optional[str], default: TextIO) -> Tuple[TextIO, bool]:
    """
    Return a writable handle and whether we own/should close it.
    """
    if path is None or path == '-' or path == '':
        return default, False
    fh = open(path, 'w', encoding='utf-8')
    return fh, True


def filter_gff_lines(lines: Sequence[str], accepted: Set[str]) -> List[str]:
    """
    Keep header lines plus the records of accepted mRNAs, in input order.

    A ``##PAF`` line is held back and emitted only if the mRNA right after it
    is accepted. Features are kept when their ``ID`` (mRNA) or ``Parent`` is
    an accepted id.
    """
    out: List[str] = []
    pending_paf: Optional[str] = None
    for ln in lines:
        if ln.startswith('##PAF'):
            pending_paf = ln
            continue
        if not ln:
            continue
        if ln.startswith('#'):
            out.append(ln)
            continue
        parts = ln.split('\t')
        if len(parts) < 9:
            continue
        ad = parse_attrs(parts[8])
        if parts[2] == 'mRNA':
            if ad.get('ID') in accepted:
                if pending_paf is not None:
                    out.append(pending_paf)
                out.append(ln)
            pending_paf = None
        elif ad.get('Parent') in accepted:
            out.append(ln)
    return out


def write_accepted_gff(
    out_path: Optional[str], lines: Sequence[str], accepted: Set[str]
) -> None:
    """
    Write the accepted records in their original GFF3 form.

    If ``out_path`` is None/'-' -> write to stdout.
    """
    out, close_me = _open_out_handle(out_path, sys.stdout)
    try:
        kept = filter_gff_lines(lines, accepted)
        if not kept or not kept[0].startswith('##gff-version'):
            out.write('##gff-version 3\n')
        for ln in kept:
            out.write(ln + '\n')
    finally:
        if close_me:
            out.close()
