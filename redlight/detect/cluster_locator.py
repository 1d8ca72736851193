from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from redlight.api.frame_data import ColorMatch, Point

MIN_MATCHES = 5
CLUSTER_RADIUS = 50.0


@dataclass
class Cluster:
    x: float
    y: float
    count: int
    total_weight: float

    @property
    def center(self) -> Point:
        return Point(self.x, self.y)

    @property
    def score(self) -> float:
        # dense AND confident beats a single excellent isolated point
        return self.count * self.total_weight

    def absorb(self, m: ColorMatch) -> None:
        total = self.total_weight + m.weight
        self.x = (self.x * self.total_weight + m.x * m.weight) / total
        self.y = (self.y * self.total_weight + m.y * m.weight) / total
        self.count += 1
        self.total_weight = total


def build_clusters(matches: Iterable[ColorMatch], radius: float = CLUSTER_RADIUS) -> List[Cluster]:
    """
    Greedy clustering: each match joins the nearest cluster whose center is
    within `radius`, otherwise it seeds a new cluster. Strongest matches are
    placed first so they anchor the centers.
    """
    clusters: List[Cluster] = []
    for m in sorted(matches, key=lambda m: m.weight, reverse=True):
        if m.weight <= 0.0:
            continue
        nearest: Optional[Cluster] = None
        best = radius
        for c in clusters:
            d = math.hypot(m.x - c.x, m.y - c.y)
            if d < best:
                nearest, best = c, d
        if nearest is not None:
            nearest.absorb(m)
        else:
            clusters.append(Cluster(x=m.x, y=m.y, count=1, total_weight=m.weight))
    return clusters


def weighted_centroid(matches: Sequence[ColorMatch]) -> Optional[Point]:
    total = sum(m.weight for m in matches)
    if total <= 0.0:
        return None
    return Point(
        sum(m.x * m.weight for m in matches) / total,
        sum(m.y * m.weight for m in matches) / total,
    )


def locate(
    matches: Sequence[ColorMatch],
    min_matches: int = MIN_MATCHES,
    radius: float = CLUSTER_RADIUS,
) -> Optional[Point]:
    """Center of the best blob among `matches`, or None for no detection."""
    if len(matches) < min_matches:
        return None

    clusters = build_clusters(matches, radius)
    if clusters:
        best = max(clusters, key=lambda c: c.score)
        return best.center

    return weighted_centroid(matches)
