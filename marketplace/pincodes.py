"""
Approximate coordinates for Indian pincodes.

Lookup is tiered: an exact 6-digit entry, then the 3-digit sorting district,
then the 2-digit postal region, then a fixed centroid for central India. The
tables are coarse on purpose; they only need to be good enough to quote a
delivery distance, not to geocode an address.
"""
from dataclasses import dataclass
from types import MappingProxyType

from .exceptions import ResolutionUnavailable


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float
    region: str

    def as_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}


def _table(rows):
    return MappingProxyType({code: Coordinates(lat, lon, region) for code, (lat, lon, region) in rows.items()})


EXACT = _table({
    "110001": (28.6139, 77.2090, "Delhi"),
    "560001": (12.9716, 77.5946, "Bengaluru"),
    "600001": (13.0827, 80.2707, "Chennai"),
    "500001": (17.3850, 78.4867, "Hyderabad"),
    "700001": (22.5726, 88.3639, "Kolkata"),
    # Mumbai: neighbourhood-level points so intra-city travel adjustments apply
    "400001": (18.9387, 72.8353, "Mumbai South"),
    "400002": (18.9520, 72.8327, "Mumbai South"),
    "400003": (18.9631, 72.8308, "Mumbai South"),
    "400004": (18.9548, 72.8224, "Mumbai South"),
    "400005": (18.9379, 72.8276, "Mumbai South"),
    "400008": (18.9568, 72.8111, "Mumbai South"),
    "400009": (18.9647, 72.7993, "Mumbai South"),
    "400010": (18.9764, 72.8156, "Mumbai South"),
    "400011": (18.9622, 72.8359, "Mumbai South"),
    "400012": (18.9673, 72.8440, "Mumbai South"),
    "400018": (19.0101, 72.8498, "Mumbai Central"),
    "400020": (19.0283, 72.8545, "Mumbai Central"),
    "400022": (19.0389, 72.8293, "Mumbai Central"),
    "400025": (19.0499, 72.8176, "Mumbai West"),
    "400026": (19.0628, 72.8308, "Mumbai West"),
    "400028": (19.0773, 72.8296, "Mumbai West"),
    "400030": (19.0883, 72.8311, "Mumbai West"),
    "400050": (19.0968, 72.8517, "Mumbai West"),
    "400051": (19.0643, 72.8396, "Mumbai West"),
    "400052": (19.1246, 72.8361, "Mumbai Northwest"),
    "400053": (19.1310, 72.8298, "Mumbai Northwest"),
    "400054": (19.1462, 72.8296, "Mumbai Northwest"),
    "400055": (19.1505, 72.8554, "Mumbai Northwest"),
    "400056": (19.1190, 72.8816, "Mumbai Northwest"),
    "400060": (19.1755, 72.8370, "Mumbai Northwest"),
    "400063": (19.2006, 72.8406, "Mumbai Northwest"),
    "400064": (19.2065, 72.8629, "Mumbai Northwest"),
    "400065": (19.2305, 72.8567, "Mumbai Northwest"),
    "400066": (19.2502, 72.8486, "Mumbai Northwest"),
    "400070": (19.0903, 72.8894, "Mumbai Northeast"),
    "400071": (19.0508, 72.9073, "Mumbai Northeast"),
    "400072": (19.0635, 72.9137, "Mumbai Northeast"),
    "400075": (19.1149, 72.9070, "Mumbai Northeast"),
    "400076": (19.1331, 72.9425, "Mumbai Northeast"),
    "400078": (19.0435, 72.9251, "Mumbai Northeast"),
    "400080": (19.0625, 72.9988, "Navi Mumbai"),
    "400081": (19.0301, 73.0297, "Navi Mumbai"),
    "400082": (19.0467, 73.0153, "Navi Mumbai"),
    "400083": (19.0154, 73.0410, "Navi Mumbai"),
    "400086": (19.0048, 73.0297, "Navi Mumbai"),
    "400087": (18.9901, 73.0365, "Navi Mumbai"),
    "400088": (18.9720, 73.0566, "Navi Mumbai"),
    "401107": (19.1943, 72.9615, "Thane"),
})

DISTRICTS = _table({
    # Delhi & NCR
    "110": (28.6139, 77.2090, "Delhi"),
    "120": (28.5355, 77.3910, "Noida"),
    "121": (28.6692, 77.4538, "Ghaziabad"),
    "122": (28.4595, 77.0266, "Gurugram"),
    "201": (28.6304, 77.2177, "Greater Noida"),
    # Mumbai & MMR
    "400": (19.0760, 72.8777, "Mumbai"),
    "401": (19.2183, 72.9781, "Thane"),
    "402": (18.9068, 72.8164, "Navi Mumbai"),
    # Bengaluru
    "560": (12.9716, 77.5946, "Bengaluru Central"),
    "561": (13.0827, 77.7085, "Bengaluru East"),
    "562": (13.1986, 77.7066, "Bengaluru North"),
    # Chennai
    "600": (13.0827, 80.2707, "Chennai Central"),
    "601": (13.1231, 80.1127, "Chennai West"),
    "602": (12.9217, 80.1152, "Chennai South"),
    "603": (13.2331, 80.3047, "Chennai North"),
    # Hyderabad
    "500": (17.3850, 78.4867, "Hyderabad"),
    "501": (17.5451, 78.5715, "Secunderabad"),
    # Kolkata
    "700": (22.5726, 88.3639, "Kolkata"),
    "701": (22.6920, 88.3697, "Kolkata North"),
    # Pune
    "411": (18.5204, 73.8567, "Pune"),
    "412": (18.4088, 73.9325, "Pimpri-Chinchwad"),
    # Ahmedabad
    "380": (23.0225, 72.5714, "Ahmedabad"),
    "382": (23.1215, 72.5714, "Gandhinagar"),
})

REGIONS = _table({
    "11": (28.6139, 77.2090, "Delhi NCR"),
    "12": (28.4595, 77.0266, "Delhi NCR"),
    "20": (28.6304, 77.2177, "UP (West)"),
    "40": (19.0760, 72.8777, "Mumbai Region"),
    "41": (18.5204, 73.8567, "Pune Region"),
    "42": (19.9975, 73.7898, "Nashik"),
    "43": (21.1458, 79.0882, "Nagpur"),
    "50": (17.3850, 78.4867, "Telangana"),
    "51": (16.5062, 80.6480, "Andhra Pradesh"),
    "53": (13.6288, 79.4192, "Southern AP"),
    "56": (12.9716, 77.5946, "Karnataka"),
    "57": (15.3173, 76.3422, "Northern Karnataka"),
    "58": (14.4673, 75.9218, "Central Karnataka"),
    "60": (13.0827, 80.2707, "Tamil Nadu"),
    "62": (9.9252, 78.1198, "Southern TN"),
    "64": (11.0168, 76.9558, "Western TN"),
    "70": (22.5726, 88.3639, "West Bengal"),
    "71": (26.7271, 88.3953, "Northern WB"),
    "38": (23.0225, 72.5714, "Gujarat"),
    "39": (21.1702, 72.8311, "Southern Gujarat"),
    "30": (26.9124, 75.7873, "Rajasthan"),
    "33": (30.9010, 75.8573, "Punjab"),
    "34": (31.1048, 77.1734, "Himachal Pradesh"),
    "18": (23.3441, 85.3096, "Jharkhand"),
    "80": (25.5941, 85.1376, "Bihar"),
    "85": (20.2961, 85.8245, "Odisha"),
})

CENTRAL_INDIA = Coordinates(20.5937, 78.9629, "Central India")


def resolve(pincode: str) -> Coordinates:
    """Map a pincode to approximate coordinates.

    Always returns a point for a string input; unknown prefixes fall back to
    the central India centroid. Format validation (6 digits) is the caller's
    job.
    """
    if not isinstance(pincode, str):
        raise ResolutionUnavailable(f"Pincode must be a string, got {type(pincode).__name__}")
    code = pincode.strip()
    hit = EXACT.get(code) or DISTRICTS.get(code[:3]) or REGIONS.get(code[:2])
    return hit or CENTRAL_INDIA
