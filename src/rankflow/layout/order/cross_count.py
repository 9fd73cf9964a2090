"""Weighted edge crossing count.

Counts crossings between adjacent layers with the accumulator tree of
Barth et al., "Simple and Efficient Bilayer Cross Counting".
"""

from __future__ import annotations

from rankflow.ir.graph import Graph


def cross_count(g: Graph, layering: list[list[str]]) -> float:
    cc = 0.0
    for north, south in zip(layering, layering[1:]):
        cc += two_layer_cross_count(g, north, south)
    return cc


def two_layer_cross_count(g: Graph, north_layer: list[str], south_layer: list[str]) -> float:
    south_pos = {v: i for i, v in enumerate(south_layer)}
    south_entries: list[tuple[int, float]] = []
    for v in north_layer:
        entries = [(south_pos[e.w], g.edge(e).weight) for e in g.out_edges(v) if e.w in south_pos]
        south_entries.extend(sorted(entries, key=lambda entry: entry[0]))

    first_index = 1
    while first_index < len(south_layer):
        first_index <<= 1
    tree_size = 2 * first_index - 1
    first_index -= 1
    tree = [0.0] * tree_size

    cc = 0.0
    for pos, weight in south_entries:
        index = pos + first_index
        tree[index] += weight
        weight_sum = 0.0
        while index > 0:
            if index % 2:
                weight_sum += tree[index + 1]
            index = (index - 1) >> 1
            tree[index] += weight
        cc += weight * weight_sum
    return cc
