#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run footprint grouping, cluster resolution and selection per chromosome.

Chromosomes share no state, so they can be processed in worker processes;
results are merged after all workers finish, in input chromosome order.
All logging happens in the parent process, after the merge.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
import logging
from typing import Dict, Iterable, List, Set

from protdedup.cluster import (
    group_by_footprint,
    resolve_clusters,
    select_representative,
)
from protdedup.models import AlignmentHit, HitDecision
from protdedup.overlap import OVERLAP_CUTOFF


def split_by_chromosome(
    hits: Iterable[AlignmentHit],
) -> Dict[str, List[AlignmentHit]]:
    """Bucket hits by chromosome, keeping first-seen chromosome order."""
    by_chrom: Dict[str, List[AlignmentHit]] = {}
    for hit in hits:
        by_chrom.setdefault(hit.chromosome, []).append(hit)
    return by_chrom


def process_chromosome(
    hits: List[AlignmentHit], cutoff: float = OVERLAP_CUTOFF
) -> List[HitDecision]:
    """
    Decide every hit on one chromosome.

    Returns one ``HitDecision`` per input hit, in footprint-group order.
    Group and cluster indices count from 0 within the chromosome.
    """
    decisions: List[HitDecision] = []
    cluster_idx = 0
    for group_idx, group in enumerate(group_by_footprint(hits)):
        for members in resolve_clusters(group, cutoff):
            best = select_representative(members)
            for hit in members:
                decisions.append(
                    HitDecision(
                        hit=hit,
                        group=group_idx,
                        cluster=cluster_idx,
                        accepted=hit is best,
                    )
                )
            cluster_idx += 1
    return decisions


def log_selections(decisions: List[HitDecision]) -> None:
    """DEBUG-log the winner of every multi-member cluster."""
    clusters: Dict[int, List[HitDecision]] = {}
    for d in decisions:
        clusters.setdefault(d.cluster, []).append(d)
    for cluster_idx, members in clusters.items():
        if len(members) < 2:
            continue
        best = next(d for d in members if d.accepted)
        logging.debug(
            '[%s] group %d cluster %d: kept %s (score=%.2f) over %s',
            best.hit.chromosome,
            best.group,
            cluster_idx,
            best.hit.id,
            best.hit.match_score,
            ','.join(d.hit.id for d in members if not d.accepted),
        )


def decide(
    hits: Iterable[AlignmentHit],
    cutoff: float = OVERLAP_CUTOFF,
    workers: int = 1,
) -> List[HitDecision]:
    """
    Cluster all hits and report the outcome for each.

    Parameters
    ----------
    hits : iterable of AlignmentHit
        Parsed, threshold-filtered hits.
    cutoff : float
        Exon overlap ratio at which two hits are the same locus.
    workers : int
        Worker processes; 1 runs in-process.

    Returns
    -------
    list of HitDecision
        Grouped by chromosome in first-seen order.
    """
    by_chrom = split_by_chromosome(hits)
    chroms = list(by_chrom)

    if workers > 1 and len(chroms) > 1:
        with ProcessPoolExecutor(max_workers=min(workers, len(chroms))) as executor:
            futures = [
                executor.submit(process_chromosome, by_chrom[c], cutoff)
                for c in chroms
            ]
            per_chrom = [f.result() for f in futures]
    else:
        per_chrom = [process_chromosome(by_chrom[c], cutoff) for c in chroms]

    decisions: List[HitDecision] = []
    for chrom, chrom_decisions in zip(chroms, per_chrom):
        n_groups = len({d.group for d in chrom_decisions})
        n_kept = sum(d.accepted for d in chrom_decisions)
        logging.info(
            '[%s] %d hits -> %d footprint groups -> %d kept',
            chrom,
            len(chrom_decisions),
            n_groups,
            n_kept,
        )
        log_selections(chrom_decisions)
        decisions.extend(chrom_decisions)
    return decisions


def deduplicate(
    hits: Iterable[AlignmentHit],
    cutoff: float = OVERLAP_CUTOFF,
    workers: int = 1,
) -> Set[str]:
    """Return the ids of the hits kept, one per resolved locus."""
    return {d.hit.id for d in decide(hits, cutoff, workers) if d.accepted}
