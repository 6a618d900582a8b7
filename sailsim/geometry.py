"""
Geometry
========

Position and angle utilities on a spherical earth.
Distances are in metres, headings in degrees (0-360, clockwise from north).
"""

import math
from dataclasses import dataclass
from typing import Mapping, Tuple

# Mean earth radius in metres
EARTH_RADIUS_M = 6371000.0


def wrap_degrees(angle: float) -> float:
    """Wrap an angle into [0, 360)."""
    return angle % 360.0


def wrap_degrees_180(angle: float) -> float:
    """Wrap an angle into (-180, 180]."""
    angle = angle % 360.0
    if angle > 180.0:
        angle -= 360.0
    return angle


@dataclass(frozen=True)
class Position:
    """A point given in decimal degrees."""
    lat: float
    lon: float

    @classmethod
    def from_dict(cls, data: Mapping) -> 'Position':
        """Build a position from a mapping with 'lat'/'lon' (or 'latitude'/'longitude')."""
        if 'lat' in data:
            return cls(float(data['lat']), float(data['lon']))
        return cls(float(data['latitude']), float(data['longitude']))

    def distance_to(self, other: 'Position') -> float:
        """
        Great circle distance in metres.

        Uses Haversine formula.
        """
        lat1_rad = math.radians(self.lat)
        lat2_rad = math.radians(other.lat)
        dlat_rad = math.radians(other.lat - self.lat)
        dlon_rad = math.radians(other.lon - self.lon)

        a = (math.sin(dlat_rad / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(dlon_rad / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_M * c

    def heading_to(self, other: 'Position') -> float:
        """
        Initial bearing from this point to another.

        Returns bearing in degrees (0-360).
        """
        lat1_rad = math.radians(self.lat)
        lat2_rad = math.radians(other.lat)
        dlon_rad = math.radians(other.lon - self.lon)

        x = math.sin(dlon_rad) * math.cos(lat2_rad)
        y = (math.cos(lat1_rad) * math.sin(lat2_rad) -
             math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlon_rad))

        return math.degrees(math.atan2(x, y)) % 360

    def distance_heading_to(self, other: 'Position') -> Tuple[float, float]:
        """Return (distance, heading) to another point."""
        return self.distance_to(other), self.heading_to(other)

    def cross_track_distance(self, start: 'Position', end: 'Position') -> float:
        """
        Signed distance from this point to the great circle start -> end.

        Positive means this point is to the right of the line.
        """
        d13 = start.distance_to(self) / EARTH_RADIUS_M
        bearing_13 = math.radians(start.heading_to(self))
        bearing_12 = math.radians(start.heading_to(end))

        xte = math.asin(math.sin(d13) * math.sin(bearing_13 - bearing_12))
        return xte * EARTH_RADIUS_M

    def side_of_line(self, start: 'Position', end: 'Position') -> int:
        """Return +1 if this point is right of start -> end, otherwise -1."""
        return 1 if self.cross_track_distance(start, end) >= 0 else -1

    def move(self, heading: float, distance: float) -> 'Position':
        """Return the point reached by travelling distance metres along heading."""
        delta = distance / EARTH_RADIUS_M
        theta = math.radians(heading)
        lat1 = math.radians(self.lat)
        lon1 = math.radians(self.lon)

        lat2 = math.asin(math.sin(lat1) * math.cos(delta) +
                         math.cos(lat1) * math.sin(delta) * math.cos(theta))
        lon2 = lon1 + math.atan2(math.sin(theta) * math.sin(delta) * math.cos(lat1),
                                 math.cos(delta) - math.sin(lat1) * math.sin(lat2))

        return Position(math.degrees(lat2), (math.degrees(lon2) + 540) % 360 - 180)
