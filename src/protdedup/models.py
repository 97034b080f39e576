#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Record types shared by the clustering core and the GFF3 boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Exon = Tuple[int, int]


@dataclass(frozen=True)
class AlignmentHit:
    """
    One candidate gene model produced by the aligner.

    Parameters
    ----------
    id : str
        Aligner-assigned identifier, unique within a run.
    chromosome : str
        Target sequence name.
    start, end : int
        Transcript span, 1-based inclusive.
    strand : str
        '+' or '-'.
    rank : int
        Aligner rank among hits of the same query (reported only).
    identity : float
        Percent identity, 0-100.
    match_score : float
        Aligned AA length * identity / 100; the ranking metric.
    exons : tuple of (int, int)
        Coding segments, 1-based inclusive, mutually non-overlapping.
    note : str
        Free-text passthrough (the query name for miniprot input).
    """

    id: str
    chromosome: str
    start: int
    end: int
    strand: str
    rank: int
    identity: float
    match_score: float
    exons: Tuple[Exon, ...]
    note: str = ''

    def __post_init__(self) -> None:
        if not self.exons:
            raise ValueError(f'Hit {self.id} has no coding segments')
        if self.start > self.end:
            raise ValueError(
                f'Hit {self.id} has start {self.start} > end {self.end}'
            )
        if not 0 <= self.identity <= 100:
            raise ValueError(f'Hit {self.id} identity out of range: {self.identity}')
        for s, e in self.exons:
            if s > e or s < self.start or e > self.end:
                raise ValueError(
                    f'Hit {self.id} exon {s}-{e} lies outside span '
                    f'{self.start}-{self.end}'
                )
        ordered = sorted(self.exons)
        for (s0, e0), (s1, e1) in zip(ordered, ordered[1:]):
            if s1 <= e0:
                raise ValueError(
                    f'Hit {self.id} exons {s0}-{e0} and {s1}-{e1} overlap'
                )

    @classmethod
    def from_alignment(
        cls,
        id: str,
        chromosome: str,
        start: int,
        end: int,
        strand: str,
        exons,
        aligned_aa: int,
        identity: float,
        rank: int = 0,
        note: str = '',
    ) -> 'AlignmentHit':
        """Build a hit, deriving ``match_score`` from aligned length and identity."""
        return cls(
            id=id,
            chromosome=chromosome,
            start=start,
            end=end,
            strand=strand,
            rank=rank,
            identity=identity,
            match_score=aligned_aa * identity / 100,
            exons=tuple((int(s), int(e)) for s, e in exons),
            note=note,
        )


@dataclass(frozen=True)
class HitDecision:
    """Where a hit landed in the clustering and whether it was kept."""

    hit: AlignmentHit
    group: int
    cluster: int
    accepted: bool
