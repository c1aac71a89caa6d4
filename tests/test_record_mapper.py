import logging

import pytest

from cdm import LoopRange
from edi_parser import tokenize
from field_formats import INTEGER, NUMBER, STOP_TYPE
from record_mapper import (
    Element,
    FieldMap,
    GroupMap,
    LoopMap,
    SegmentMap,
    find_segment,
    map_loop,
    map_segment,
    qualifier,
)

pytestmark = pytest.mark.unit

def _map(edi: str, fields):
    document = tokenize(edi)
    return map_loop(document.segments, document.full_range(), fields)

class TestScalarFields:

    def test_field_map_reads_the_first_matching_segment(self):
        record = _map("L11*FIRST*BM~L11*SECOND*BM~", {"ref": FieldMap("L11", 0)})

        assert record == {"ref": "FIRST"}

    def test_qualified_field_map(self):
        fields = {"purchaseOrder": FieldMap("L11", 0, qualifier=qualifier(1, "PO"))}

        record = _map("L11*REF001*BM~L11*PO555*PO~", fields)

        assert record == {"purchaseOrder": "PO555"}

    def test_fallback_positions(self):
        fields = {"shipmentId": FieldMap("B2", 3, fallbacks=(2,))}

        assert _map("B2**SCAC*SHIP123~", fields) == {"shipmentId": "SHIP123"}
        assert _map("B2**SCAC**SHIP456~", fields) == {"shipmentId": "SHIP456"}

    def test_empty_and_missing_scalars_are_omitted(self):
        fields = {
            "scac": FieldMap("B2", 1),
            "shipmentId": FieldMap("B2", 3),
            "totalWeight": FieldMap("L3", 0, NUMBER),
        }

        assert _map("B2**SCAC*   ~", fields) == {"scac": "SCAC"}

    def test_unparsable_numeric_is_explicit_none(self, caplog):
        with caplog.at_level(logging.WARNING):
            record = _map("L3*HEAVY*G~", {"weight": FieldMap("L3", 0, NUMBER), "qualifier": FieldMap("L3", 1)})

        assert "weight" in record and record["weight"] is None
        assert record["qualifier"] == "G"

    def test_derived_format(self):
        fields = {"code": FieldMap("S5", 1), "stopType": FieldMap("S5", 1, STOP_TYPE)}

        assert _map("S5*1*CU~", fields) == {"code": "CU", "stopType": "Delivery"}

class TestSegmentMaps:

    def test_map_segment_skips_short_segments(self):
        segment = tokenize("AT8*G*LB*500~").segments[0]
        fields = {"qualifier": Element(0), "weight": Element(2, NUMBER), "quantity": Element(4, INTEGER)}

        assert map_segment(segment, fields) == {"qualifier": "G", "weight": 500}

    def test_single_segment_map_is_none_when_absent(self):
        record = _map("B2**SCAC~", {"weight": SegmentMap("AT8", {"weight": Element(2, NUMBER)})})

        assert record == {"weight": None}

    def test_repeated_segment_map_keeps_order(self):
        fields = {"references": SegmentMap("L11", {"id": Element(0), "qualifier": Element(1)}, many=True)}

        record = _map("L11*B*BM~G62*37*20210102~L11*A*PO~", fields)

        assert record == {"references": [{"id": "B", "qualifier": "BM"}, {"id": "A", "qualifier": "PO"}]}

    def test_repeated_segment_map_is_an_empty_list_when_absent(self):
        record = _map("B2**SCAC~", {"references": SegmentMap("L11", {"id": Element(0)}, many=True)})

        assert record == {"references": []}

class TestGroupsAndLoops:

    def test_group_without_anchor_is_none(self):
        fields = {"hazmat": GroupMap({"unNumber": FieldMap("LH1", 2)}, anchor="LH1")}

        assert _map("L5*1*WIDGETS~", fields) == {"hazmat": None}
        assert _map("L5*1*WIDGETS~LH1*PC*2*UN1993~", fields) == {"hazmat": {"unNumber": "UN1993"}}

    def test_nested_loop_hides_its_segments_from_the_parent(self):
        fields = {
            "references": SegmentMap("L11", {"id": Element(0)}, many=True),
            "items": LoopMap("L5", {
                "number": FieldMap("L5", 0, INTEGER),
                "references": SegmentMap("L11", {"id": Element(0)}, many=True),
            }),
        }

        record = _map("S5*1*CL~L11*STOP~L5*1~L11*ITEM1~L5*2~L11*ITEM2~", fields)

        assert record["references"] == [{"id": "STOP"}]
        assert record["items"] == [
            {"number": 1, "references": [{"id": "ITEM1"}]},
            {"number": 2, "references": [{"id": "ITEM2"}]},
        ]

    def test_flat_loop_stops_at_nested_loop_boundary(self):
        party = LoopMap("N1", {"code": FieldMap("N1", 0), "city": FieldMap("N4", 0)}, nested=False, many=False)
        fields = {
            "party": party,
            "items": LoopMap("L5", {"description": FieldMap("L5", 1)}),
        }

        record = _map("S5*1*CL~N1*SH*ACME~N4*DALLAS~L5*1*WIDGETS~N4*ELSEWHERE~", fields)

        assert record["party"] == {"code": "SH", "city": "DALLAS"}
        assert record["items"] == [{"description": "WIDGETS"}]

    def test_loop_select_filters_occurrences(self):
        fields = {"billTo": LoopMap("N1", {"name": FieldMap("N1", 1)}, select=qualifier(0, "BT"), many=False, nested=False)}

        assert _map("N1*SH*SHIPPER~N1*BT*BILLER~", fields) == {"billTo": {"name": "BILLER"}}
        assert _map("N1*SH*SHIPPER~", fields) == {"billTo": None}

    def test_loop_terminators(self):
        fields = {
            "stops": LoopMap("S5", {"seq": FieldMap("S5", 0, INTEGER)}, terminators=("L3",)),
            "totals": FieldMap("L3", 0, NUMBER),
        }

        record = _map("S5*1~S5*2~L3*1000~", fields)

        assert record == {"stops": [{"seq": 1}, {"seq": 2}], "totals": 1000}

    def test_map_loop_over_a_sub_range(self):
        document = tokenize("S5*1~L11*A~S5*2~L11*B~")
        fields = {"references": SegmentMap("L11", {"id": Element(0)}, many=True)}

        record = map_loop(document.segments, LoopRange(start_index=2, end_index=4), fields)

        assert record == {"references": [{"id": "B"}]}

    def test_unknown_field_specification_raises(self):
        with pytest.raises(TypeError):
            _map("S5*1~", {"bogus": ("S5", 0)})

def test_find_segment_honours_scope():
    document = tokenize("L11*A~S5*1~L11*B~")

    assert find_segment(document.segments, [1, 2], "L11").element(0) == "B"
    assert find_segment(document.segments, [1], "L11") is None
