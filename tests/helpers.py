"""Plain helpers shared by the test modules."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from protdedup.models import AlignmentHit


def make_hit(
    hit_id: str,
    exons: Sequence[Tuple[int, int]],
    score: float = 50.0,
    chromosome: str = 'chr1',
    span: Optional[Tuple[int, int]] = None,
) -> AlignmentHit:
    """Build a hit whose span defaults to the exon extent."""
    start, end = span if span else (min(s for s, _ in exons), max(e for _, e in exons))
    return AlignmentHit(
        id=hit_id,
        chromosome=chromosome,
        start=start,
        end=end,
        strand='+',
        rank=1,
        identity=100.0,
        match_score=score,
        exons=tuple(exons),
    )


def parse_gff_attrs(attr_field: str) -> Dict[str, str]:
    d: Dict[str, str] = {}
    for kv in attr_field.split(';'):
        if '=' in kv:
            k, v = kv.split('=', 1)
            d[k] = v
    return d


def mrna_ids(gff_text: str) -> List[str]:
    """IDs of mRNA features in GFF3 text, in order."""
    ids = []
    for ln in gff_text.splitlines():
        cols = ln.split('\t')
        if len(cols) >= 9 and cols[2] == 'mRNA':
            ids.append(parse_gff_attrs(cols[8]).get('ID'))
    return ids
