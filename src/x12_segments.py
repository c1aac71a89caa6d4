from typing import Dict, Optional

from field_formats import DATE, DATE_QUALIFIER_NAME, ENTITY_ID_NAME, INTEGER, NUMBER, TIME
from record_mapper import Element, FieldMap, LoopMap, Qualifier, SegmentMap

# Element layouts shared by the 204 and 214 templates.

REFERENCE_FIELDS: Dict[str, Element] = {  # L11
    "referenceId": Element(0),
    "referenceIdQualifier": Element(1),
    "description": Element(2),
}

HANDLING_FIELDS: Dict[str, Element] = {  # AT5
    "specialHandlingCode": Element(0),
    "specialServicesCode": Element(1),
}

DATE_FIELDS: Dict[str, Element] = {  # G62
    "dateQualifier": Element(0),
    "dateQualifierName": Element(0, DATE_QUALIFIER_NAME),
    "date": Element(1, DATE),
    "timeQualifier": Element(2),
    "time": Element(3, TIME),
}

WEIGHT_FIELDS: Dict[str, Element] = {  # AT8
    "weightQualifier": Element(0),
    "weightUnitCode": Element(1),
    "weight": Element(2, NUMBER),
    "ladingQuantity": Element(4, INTEGER),
}

ADDRESS_FIELDS: Dict[str, Element] = {  # N3
    "addressLine1": Element(0),
    "addressLine2": Element(1),
}

GEOGRAPHIC_FIELDS: Dict[str, Element] = {  # N4
    "city": Element(0),
    "state": Element(1),
    "postalCode": Element(2),
    "country": Element(3),
}

def references() -> SegmentMap:
    return SegmentMap("L11", REFERENCE_FIELDS, many=True)

def party_loop(location_key: str = "location", select: Optional[Qualifier] = None, many: bool = True) -> LoopMap:
    """N1/N3/N4 party loop. Parties are flat: they never hide segments from the enclosing record."""
    return LoopMap(
        sentinel="N1",
        fields={
            "entityIdCode": FieldMap("N1", 0),
            "entityIdName": FieldMap("N1", 0, ENTITY_ID_NAME),
            "name": FieldMap("N1", 1),
            "idCodeQualifier": FieldMap("N1", 2),
            "idCode": FieldMap("N1", 3),
            "address": SegmentMap("N3", ADDRESS_FIELDS),
            location_key: SegmentMap("N4", GEOGRAPHIC_FIELDS),
        },
        select=select,
        many=many,
        nested=False,
    )
