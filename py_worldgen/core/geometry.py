"""
Planar geometry helpers on the x/z ground plane.
"""

import math

from .models import Vec3
from .seeded_prng import SeededRandom


def distance_to_segment(
    px: float, pz: float, x1: float, z1: float, x2: float, z2: float
) -> float:
    """
    Distance from point (px, pz) to the segment (x1, z1)-(x2, z2).

    A zero-length segment degrades to the distance to its start point.
    """
    a = px - x1
    b = pz - z1
    c = x2 - x1
    d = z2 - z1

    len_sq = c * c + d * d
    param = (a * c + b * d) / len_sq if len_sq != 0 else -1.0

    if param < 0:
        xx, zz = x1, z1
    elif param > 1:
        xx, zz = x2, z2
    else:
        xx = x1 + param * c
        zz = z1 + param * d

    return math.hypot(px - xx, pz - zz)


def random_position(rng: SeededRandom, min_radius: float, max_radius: float) -> Vec3:
    """Random point in the annulus [min_radius, max_radius) around the origin."""
    angle = rng.random() * math.pi * 2
    radius = min_radius + rng.random() * (max_radius - min_radius)
    return Vec3(x=math.cos(angle) * radius, y=0.0, z=math.sin(angle) * radius)


def nearby_position(
    rng: SeededRandom, center: Vec3, min_distance: float, max_distance: float
) -> Vec3:
    """Random point in an annulus around center, keeping its elevation."""
    angle = rng.random() * math.pi * 2
    distance = min_distance + rng.random() * (max_distance - min_distance)
    return Vec3(
        x=center.x + math.cos(angle) * distance,
        y=center.y,
        z=center.z + math.sin(angle) * distance,
    )


def circle_points(center: Vec3, radius: float, segments: int = 16) -> list:
    """Closed ring of segments + 1 points, first point repeated at the end."""
    points = []
    for i in range(segments + 1):
        angle = (i / segments) * math.pi * 2
        points.append(
            Vec3(
                x=center.x + math.cos(angle) * radius,
                y=0.0,
                z=center.z + math.sin(angle) * radius,
            )
        )
    return points


def quadratic_bezier(start: Vec3, control: Vec3, end: Vec3, steps: int) -> list:
    """Sample a quadratic Bezier curve at steps + 1 evenly spaced parameters."""
    points = []
    for i in range(steps + 1):
        t = i / steps
        u = 1 - t
        points.append(
            Vec3(
                x=u * u * start.x + 2 * u * t * control.x + t * t * end.x,
                y=0.0,
                z=u * u * start.z + 2 * u * t * control.z + t * t * end.z,
            )
        )
    return points
