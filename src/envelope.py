import logging
from typing import Any, Dict, List, Optional

from cdm import BuildMeta, ParsedDocument, Segment
from field_formats import INTEGER, pad_right
from loop_partitioner import find_first
from record_mapper import Element, map_segment

logger = logging.getLogger(__name__)

# Fixed element positions; identical for every transaction set.
ISA_FIELDS: Dict[str, Element] = {
    "authorizationQualifier": Element(0),
    "authorizationInfo": Element(1),
    "securityQualifier": Element(2),
    "securityInfo": Element(3),
    "senderIdQualifier": Element(4),
    "senderId": Element(5),
    "receiverIdQualifier": Element(6),
    "receiverId": Element(7),
    "date": Element(8),
    "time": Element(9),
    "standardsId": Element(10),
    "version": Element(11),
    "controlNumber": Element(12),
    "acknowledgmentRequested": Element(13),
    "usageIndicator": Element(14),
    "componentElementSeparator": Element(15),
}

GS_FIELDS: Dict[str, Element] = {
    "functionalId": Element(0),
    "applicationSenderCode": Element(1),
    "applicationReceiverCode": Element(2),
    "date": Element(3),
    "time": Element(4),
    "groupControlNumber": Element(5),
    "responsibleAgencyCode": Element(6),
    "version": Element(7),
}

ST_FIELDS: Dict[str, Element] = {
    "transactionSetId": Element(0),
    "transactionSetControlNumber": Element(1),
}

SE_FIELDS: Dict[str, Element] = {
    "numberOfIncludedSegments": Element(0, INTEGER),
    "transactionSetControlNumber": Element(1),
}

GE_FIELDS: Dict[str, Element] = {
    "numberOfTransactionSets": Element(0, INTEGER),
    "groupControlNumber": Element(1),
}

IEA_FIELDS: Dict[str, Element] = {
    "numberOfIncludedFunctionalGroups": Element(0, INTEGER),
    "interchangeControlNumber": Element(1),
}

def _first_segments(document: ParsedDocument, identifiers: List[str]) -> Dict[str, Segment]:
    found: Dict[str, Segment] = {}
    for identifier in identifiers:
        index = find_first(document.segments, identifier)
        if index is not None:
            found[identifier] = document.segments[index]
    return found

def _map_optional(segment: Optional[Segment], fields: Dict[str, Element]) -> Optional[Dict[str, Any]]:
    return map_segment(segment, fields) if segment is not None else None

def extract_envelope(document: ParsedDocument) -> Dict[str, Any]:
    """ISA/GS/ST headers; each is None when its segment is absent. Control numbers are not cross-checked."""
    found = _first_segments(document, ["ISA", "GS", "ST"])
    return {
        "interchangeControlHeader": _map_optional(found.get("ISA"), ISA_FIELDS),
        "functionalGroupHeader": _map_optional(found.get("GS"), GS_FIELDS),
        "transactionSetHeader": _map_optional(found.get("ST"), ST_FIELDS),
    }

def extract_trailer(document: ParsedDocument) -> Dict[str, Any]:
    found = _first_segments(document, ["SE", "GE", "IEA"])
    return {
        "transactionSetTrailer": _map_optional(found.get("SE"), SE_FIELDS),
        "functionalGroupTrailer": _map_optional(found.get("GE"), GE_FIELDS),
        "interchangeControlTrailer": _map_optional(found.get("IEA"), IEA_FIELDS),
    }

# --- Envelope segment builders ---
def build_segment(identifier: str, elements: List[Any], field_delimiter: str = '*') -> str:
    values = ['' if value is None else str(value) for value in elements]
    return field_delimiter.join([identifier] + values)

def build_isa(envelope: Dict[str, Any], meta: BuildMeta) -> Optional[str]:
    isa = (envelope or {}).get("interchangeControlHeader")
    if not isa:
        return None

    # ISA is fixed-width: every element is padded so the terminator lands on offset 105.
    elements = [
        pad_right(isa.get("authorizationQualifier") or "00", 2),
        pad_right(isa.get("authorizationInfo"), 10),
        pad_right(isa.get("securityQualifier") or "00", 2),
        pad_right(isa.get("securityInfo"), 10),
        pad_right(isa.get("senderIdQualifier") or "ZZ", 2),
        pad_right(isa.get("senderId"), 15),
        pad_right(isa.get("receiverIdQualifier") or "ZZ", 2),
        pad_right(isa.get("receiverId"), 15),
        pad_right(isa.get("date"), 6),
        pad_right(isa.get("time"), 4),
        pad_right(isa.get("standardsId") or "U", 1),
        pad_right(isa.get("version") or "00401", 5),
        str(isa.get("controlNumber") or "000000001").strip().zfill(9),
        pad_right(isa.get("acknowledgmentRequested") or "0", 1),
        pad_right(isa.get("usageIndicator") or "P", 1),
        pad_right(isa.get("componentElementSeparator") or meta.component_separator, 1),
    ]
    return build_segment("ISA", elements, meta.field_delimiter)

def build_gs(envelope: Dict[str, Any], meta: BuildMeta) -> Optional[str]:
    gs = (envelope or {}).get("functionalGroupHeader")
    if not gs:
        return None

    return build_segment("GS", [
        gs.get("functionalId") or "SM",
        gs.get("applicationSenderCode") or "",
        gs.get("applicationReceiverCode") or "",
        gs.get("date") or "",
        gs.get("time") or "",
        gs.get("groupControlNumber") or "1",
        gs.get("responsibleAgencyCode") or "X",
        gs.get("version") or "004010",
    ], meta.field_delimiter)

def _transaction_set_control_number(envelope: Dict[str, Any]) -> str:
    st = (envelope or {}).get("transactionSetHeader") or {}
    return st.get("transactionSetControlNumber") or "0001"

def build_st(envelope: Dict[str, Any], transaction_set_id: str, meta: BuildMeta) -> str:
    st = (envelope or {}).get("transactionSetHeader") or {}
    recorded_id = st.get("transactionSetId")
    if recorded_id and recorded_id != transaction_set_id:
        logger.warning(f"Record was parsed as transaction set {recorded_id}; writing ST01 as {transaction_set_id}.")
    return build_segment("ST", [
        transaction_set_id,
        _transaction_set_control_number(envelope),
    ], meta.field_delimiter)

def build_se(segment_count: int, envelope: Dict[str, Any], meta: BuildMeta) -> str:
    return build_segment("SE", [segment_count, _transaction_set_control_number(envelope)], meta.field_delimiter)

def build_ge(envelope: Dict[str, Any], meta: BuildMeta) -> str:
    gs = (envelope or {}).get("functionalGroupHeader") or {}
    return build_segment("GE", [meta.transaction_count, gs.get("groupControlNumber") or "1"], meta.field_delimiter)

def build_iea(envelope: Dict[str, Any], meta: BuildMeta) -> str:
    isa = (envelope or {}).get("interchangeControlHeader") or {}
    control_number = str(isa.get("controlNumber") or "000000001").strip().zfill(9)
    return build_segment("IEA", [meta.group_count, control_number], meta.field_delimiter)

def assemble_edi(segments: List[Optional[str]], segment_delimiter: str = '~') -> str:
    return segment_delimiter.join(s for s in segments if s) + segment_delimiter
