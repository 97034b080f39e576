#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Group alignments into loci and pick one representative per locus.

Stages, applied to the hits of a single chromosome:

1. ``group_by_footprint``: coarse sweep over span-sorted hits.
2. ``resolve_clusters``: within a footprint group, pairwise exon overlap
   tests assign provisional labels (``assign_provisional_labels``), then
   labels linked by an overlap are merged as connected components
   (``connected_components``).
3. ``select_representative``: highest match score per class.

Label assignment depends on the order pairs are visited. Pairs are always
enumerated as ``(i, j)`` with ``i <= j`` over the group's list order so that
results are reproducible.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from protdedup.models import AlignmentHit
from protdedup.overlap import OVERLAP_CUTOFF, exons_overlap

OverlapTest = Callable[[AlignmentHit, AlignmentHit], bool]


# ---------------------------------------------------------------------------
# Footprint grouping
# ---------------------------------------------------------------------------


def group_by_footprint(hits: Sequence[AlignmentHit]) -> List[List[AlignmentHit]]:
    """
    Split hits on one chromosome into runs of chained spans.

    Hits are sorted by start (stable, so equal starts keep input order). A new
    group opens whenever a hit starts at or after the end of the hit processed
    just before it. The boundary is that previous hit's end, not the largest
    end seen so far in the group.
    """
    groups: List[List[AlignmentHit]] = []
    boundary = 0
    for hit in sorted(hits, key=lambda h: h.start):
        if hit.start >= boundary or not groups:
            groups.append([])
        groups[-1].append(hit)
        boundary = hit.end
    return groups


# ---------------------------------------------------------------------------
# Cluster resolution
# ---------------------------------------------------------------------------


def assign_provisional_labels(
    group: Sequence[AlignmentHit], overlaps: OverlapTest
) -> Tuple[List[int], Set[Tuple[int, int]]]:
    """
    Label hits from pairwise overlap tests.

    Parameters
    ----------
    group : sequence of AlignmentHit
        One footprint group, in group order.
    overlaps : callable
        Pairwise same-locus test.

    Returns
    -------
    (list of int, set of (int, int))
        Label per hit (by position in ``group``), and links between labels
        that were already distinct when an overlap joined their hits. Labels
        are numbered from 0 in creation order.
    """
    labels: List[Optional[int]] = [None] * len(group)
    links: Set[Tuple[int, int]] = set()
    next_label = 0

    for i in range(len(group)):
        for j in range(i, len(group)):
            li, lj = labels[i], labels[j]
            if overlaps(group[i], group[j]):
                if li is None and lj is None:
                    labels[i] = labels[j] = next_label
                    next_label += 1
                elif li is None:
                    labels[i] = lj
                elif lj is None:
                    labels[j] = li
                elif li != lj:
                    links.add((min(li, lj), max(li, lj)))
            else:
                if li is None:
                    labels[i] = next_label
                    next_label += 1
                if lj is None:
                    labels[j] = next_label
                    next_label += 1

    # every hit is visited at least through its self-pair
    return [int(lab) for lab in labels], links


def connected_components(
    n_labels: int, links: Set[Tuple[int, int]]
) -> List[List[int]]:
    """
    Connected components of the label graph, breadth-first.

    Every label in ``range(n_labels)`` is a node, including those without
    links. Components are returned in order of their smallest label, each
    sorted ascending.
    """
    adjacency: Dict[int, Set[int]] = {lab: set() for lab in range(n_labels)}
    for a, b in links:
        adjacency[a].add(b)
        adjacency[b].add(a)

    visited: Set[int] = set()
    components: List[List[int]] = []
    for root in range(n_labels):
        if root in visited:
            continue
        visited.add(root)
        comp = [root]
        queue = deque([root])
        while queue:
            cur = queue.popleft()
            for nxt in adjacency[cur]:
                if nxt not in visited:
                    visited.add(nxt)
                    comp.append(nxt)
                    queue.append(nxt)
        components.append(sorted(comp))
    return components


def resolve_clusters(
    group: Sequence[AlignmentHit], cutoff: float = OVERLAP_CUTOFF
) -> List[List[AlignmentHit]]:
    """
    Partition a footprint group into equivalence classes of same-locus hits.

    Each class lists its members in group order. Together the classes cover
    the group exactly once.
    """
    if len(group) == 1:
        return [list(group)]
    if not group:
        return []

    labels, links = assign_provisional_labels(
        group, lambda a, b: exons_overlap(a, b, cutoff)
    )
    components = connected_components(max(labels) + 1, links)

    component_of: Dict[int, int] = {}
    for idx, comp in enumerate(components):
        for lab in comp:
            component_of[lab] = idx

    classes: List[List[AlignmentHit]] = [[] for _ in components]
    for hit, lab in zip(group, labels):
        classes[component_of[lab]].append(hit)
    return classes


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def select_representative(members: Sequence[AlignmentHit]) -> AlignmentHit:
    """Highest ``match_score`` wins; the earlier member wins a tie."""
    best = members[0]
    for hit in members[1:]:
        if hit.match_score > best.match_score:
            best = hit
    return best
