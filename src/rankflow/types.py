"""Shared type definitions for rankflow.

Points and the enums for the recognized layout options. Enum values are the
lower-case strings callers use in graph attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class Point:
    """A 2D point in layout coordinates."""

    x: float
    y: float


class RankDir(Enum):
    TB = "tb"
    BT = "bt"
    LR = "lr"
    RL = "rl"

    @classmethod
    def default(cls) -> RankDir:
        return cls.TB

    @property
    def is_vertical(self) -> bool:
        return self in (RankDir.TB, RankDir.BT)


class Ranker(Enum):
    NETWORK_SIMPLEX = "network-simplex"
    TIGHT_TREE = "tight-tree"
    LONGEST_PATH = "longest-path"

    @classmethod
    def default(cls) -> Ranker:
        return cls.NETWORK_SIMPLEX


class Acyclicer(Enum):
    DFS = "dfs"
    GREEDY = "greedy"

    @classmethod
    def default(cls) -> Acyclicer:
        return cls.DFS


class Align(Enum):
    UL = "ul"  # up, left
    UR = "ur"
    DL = "dl"
    DR = "dr"


class LabelPos(Enum):
    LEFT = "l"
    CENTER = "c"
    RIGHT = "r"

    @classmethod
    def default(cls) -> LabelPos:
        return cls.RIGHT


class Relationship(Enum):
    """Which incident edges a layer graph copies from the base graph."""

    IN_EDGES = "in"
    OUT_EDGES = "out"
