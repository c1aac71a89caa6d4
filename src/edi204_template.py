# X12 204 Motor Carrier Load Tender
from field_formats import INTEGER, NUMBER, STOP_TYPE
from record_mapper import Element, FieldMap, GroupMap, LoopMap, SegmentMap, qualifier
from transaction_template import TransactionTemplate
from x12_segments import (
    DATE_FIELDS,
    HANDLING_FIELDS,
    WEIGHT_FIELDS,
    party_loop,
    references,
)

TRANSACTION_SET_ID = "204"
NAME = "Motor Carrier Load Tender"

# Some senders drop one of the unused leading B2 placeholders, which shifts the
# shipment id into B203 and the payment method into B205.
SHIPMENT_INFO = GroupMap(
    anchor="B2",
    fields={
        "standardCarrierAlphaCode": FieldMap("B2", 1),
        "shipmentId": FieldMap("B2", 3, fallbacks=(2,)),
        "shipmentMethodOfPayment": FieldMap("B2", 5, fallbacks=(4,)),
    },
)

HAZARDOUS_MATERIAL = GroupMap(
    anchor="LH1",
    fields={
        "unitOrBasisForMeasurementCode": FieldMap("LH1", 0),
        "ladingQuantity": FieldMap("LH1", 1, INTEGER),
        "unOrNaIdNumber": FieldMap("LH1", 2),
        "packingGroupCode": FieldMap("LH1", 9),
        "hazardousClass": FieldMap("LH2", 0),
        "properShippingName": FieldMap("LH3", 0),
        "hazardousClassQualifier": FieldMap("LH3", 1),
        "nosIndicator": FieldMap("LH3", 2),
        "hazardousMaterialDescription": SegmentMap("LFH", {
            "hazardousCode": Element(0),
            "hazardousDescription": Element(1),
        }),
    },
)

LINE_ITEM_FIELDS = {
    "ladingLineItemNumber": FieldMap("L5", 0, INTEGER),
    "description": FieldMap("L5", 1),
    "commodityCode": FieldMap("L5", 2),
    "commodityCodeQualifier": FieldMap("L5", 3),
    "packagingCode": FieldMap("L5", 4),
    "ladingDescription": FieldMap("L5", 5),
    "weightQualifier": FieldMap("L5", 6),
    "hazardousMaterialCode": FieldMap("L5", 7),
    "nmfcCode": FieldMap("L5", 8),
    "weight": SegmentMap("AT8", WEIGHT_FIELDS),
    "contact": SegmentMap("G61", {
        "contactFunctionCode": Element(0),
        "name": Element(1),
        "communicationNumberQualifier": Element(2),
        "communicationNumber": Element(3),
    }),
    "references": references(),
    "hazardousMaterial": HAZARDOUS_MATERIAL,
}

STOP_FIELDS = {
    "stopSequence": FieldMap("S5", 0, INTEGER),
    "stopReasonCode": FieldMap("S5", 1),
    "stopType": FieldMap("S5", 1, STOP_TYPE),
    "references": references(),
    "dates": SegmentMap("G62", DATE_FIELDS, many=True),
    "weight": SegmentMap("AT8", WEIGHT_FIELDS),
    "location": party_loop("cityStateZip", select=qualifier(0, "SH", "CN", "SF", "ST"), many=False),
    "lineItems": LoopMap("L5", LINE_ITEM_FIELDS),
}

BODY_FIELDS = {
    "header": GroupMap({
        "shipmentInfo": SHIPMENT_INFO,
        "purposeCode": SegmentMap("B2A", {
            "transactionSetPurposeCode": Element(0),
            "applicationTypeCode": Element(1),
        }),
        "references": references(),
        "dates": SegmentMap("G62", DATE_FIELDS, many=True),
        "billOfLadingHandling": SegmentMap("AT5", HANDLING_FIELDS, many=True),
    }),
    "billTo": party_loop("location", select=qualifier(0, "BT"), many=False),
    # L3 closes the stop list.
    "stops": LoopMap("S5", STOP_FIELDS, terminators=("L3",)),
    "totals": SegmentMap("L3", {
        "weight": Element(0, NUMBER),
        "weightQualifier": Element(1),
        "freightRate": Element(2, NUMBER),
        "rateValueQualifier": Element(3),
        "charge": Element(4, NUMBER),
        "ladingQuantity": Element(10, INTEGER),
    }),
}

TEMPLATE = TransactionTemplate(TRANSACTION_SET_ID, NAME, BODY_FIELDS)
