# X12 214 Transportation Carrier Shipment Status
from field_formats import DATE, INTEGER, NUMBER, TIME
from record_mapper import Element, FieldMap, GroupMap, LoopMap, SegmentMap
from transaction_template import TransactionTemplate
from x12_segments import HANDLING_FIELDS, WEIGHT_FIELDS, party_loop, references

TRANSACTION_SET_ID = "214"
NAME = "Transportation Carrier Shipment Status"

STATUS_EVENT_FIELDS = {  # AT7
    "statusCode": Element(0),
    "date": Element(1, DATE),
    "time": Element(2, TIME),
    "weight": Element(3, NUMBER),
}

STOP_FIELDS = {
    "stopNumber": FieldMap("LX", 0, INTEGER),
    "events": SegmentMap("AT7", STATUS_EVENT_FIELDS, many=True),
    "location": SegmentMap("MS1", {
        "city": Element(0),
        "state": Element(1),
        "country": Element(2),
    }),
    "weight": SegmentMap("AT8", WEIGHT_FIELDS),
    "references": references(),
}

BODY_FIELDS = {
    "header": GroupMap({
        "shipmentInfo": SegmentMap("B10", {
            "referenceId": Element(0),
            "shipmentId": Element(1),
            "carrierId": Element(2),
            "shipmentMethod": Element(3),
        }),
        "references": references(),
        "statusHandling": SegmentMap("AT5", HANDLING_FIELDS, many=True),
    }),
    "shipment": party_loop("location"),
    "stops": LoopMap("LX", STOP_FIELDS),
}

TEMPLATE = TransactionTemplate(TRANSACTION_SET_ID, NAME, BODY_FIELDS)
