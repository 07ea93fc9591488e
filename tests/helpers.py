from greenquote.engine.geo import AddressComponent, Bounds, LatLng, Place

# roughly metres per degree, squared; good enough for fixture geometry
DEG2_TO_M2 = 1e10


class PlanarAreaCalculator:
    """Shoelace area in degree space, scaled to square metres."""

    def __init__(self):
        self.calls = 0

    def geodesic_area_m2(self, ring):
        self.calls += 1
        pts = list(ring)
        if len(pts) < 3:
            return 0.0
        # relative to the first vertex to keep float cancellation out of it
        o = pts[0]
        rel = [(p.lng - o.lng, p.lat - o.lat) for p in pts]
        acc = 0.0
        for (x1, y1), (x2, y2) in zip(rel, rel[1:] + rel[:1]):
            acc += x1 * y2 - x2 * y1
        return abs(acc) / 2 * DEG2_TO_M2


def square(lat: float, lng: float, side: float = 0.0001):
    """side 0.0001 deg -> 100 m^2 -> 1076 sq ft with PlanarAreaCalculator"""
    return [(lat, lng), (lat, lng + side), (lat + side, lng + side), (lat + side, lng)]


def make_place(
    lat=40.0,
    lng=-75.0,
    route="Maple Ave",
    route_short=None,
    postal_code="19103",
    street_number="12",
    with_center=True,
):
    components = []
    if street_number:
        components.append(AddressComponent(street_number, street_number, ("street_number",)))
    if route:
        components.append(AddressComponent(route, route_short or route, ("route",)))
    if postal_code:
        components.append(AddressComponent(postal_code, postal_code, ("postal_code",)))
    return Place(
        center=LatLng(lat, lng) if with_center else None,
        viewport=Bounds(lat - 0.001, lng - 0.001, lat + 0.001, lng + 0.001),
        components=tuple(components),
        formatted_address=f"{street_number or ''} {route or ''}, {postal_code or ''}".strip(),
    )


class FakeResolver:
    def __init__(self, places=None):
        self.places = places or {}
        self.queries = []

    def resolve(self, text):
        self.queries.append(text)
        return self.places.get(text)


GOOGLE_RESULT = {
    "formatted_address": "12 N Main St, Springfield, IL 62701, USA",
    "geometry": {
        "location": {"lat": 39.8017, "lng": -89.6436},
        "viewport": {
            "northeast": {"lat": 39.803, "lng": -89.642},
            "southwest": {"lat": 39.800, "lng": -89.645},
        },
    },
    "address_components": [
        {"long_name": "12", "short_name": "12", "types": ["street_number"]},
        {"long_name": "North Main Street", "short_name": "N Main St", "types": ["route"]},
        {"long_name": "62701", "short_name": "62701", "types": ["postal_code"]},
    ],
}
