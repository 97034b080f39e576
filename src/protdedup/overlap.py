#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exon-level overlap test between two alignments.

Two hits describe the same coding locus when the summed exon-by-exon overlap
covers at least ``cutoff`` of either hit's total coding length.
"""

from __future__ import annotations

from typing import Sequence

from protdedup.models import AlignmentHit, Exon

OVERLAP_CUTOFF = 0.5


def exon_length(exons: Sequence[Exon]) -> int:
    """Total coding length in nt (closed intervals)."""
    return sum(e - s + 1 for s, e in exons)


def total_overlap(a: Sequence[Exon], b: Sequence[Exon]) -> int:
    """
    Sum of pairwise exon intersections over the full cross product.

    Exons within one hit never overlap, so no base is counted twice from the
    same side.
    """
    total = 0
    for a0, a1 in a:
        for b0, b1 in b:
            total += max(0, min(a1, b1) - max(a0, b0) + 1)
    return total


def exons_overlap(
    a: AlignmentHit, b: AlignmentHit, cutoff: float = OVERLAP_CUTOFF
) -> bool:
    """
    True if the shared coding length reaches ``cutoff`` of ``a`` or of ``b``.

    Symmetric in its two hit arguments.
    """
    shared = total_overlap(a.exons, b.exons)
    return (
        shared / exon_length(a.exons) >= cutoff
        or shared / exon_length(b.exons) >= cutoff
    )
