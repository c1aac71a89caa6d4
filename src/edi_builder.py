import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from cdm import BuildMeta
from envelope import (
    assemble_edi,
    build_ge,
    build_gs,
    build_iea,
    build_isa,
    build_se,
    build_segment,
    build_st,
)
from record_mapper import Element, FieldMap, GroupMap, LoopMap, MapNode, Qualifier, SegmentMap

logger = logging.getLogger(__name__)

# (identifier, elements) pairs, rendered with the output delimiter at the end.
RawSegment = Tuple[str, List[str]]

def _has_value(value: Any) -> bool:
    return value is not None and value != ''

def _as_record(value: Any, name: str) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        logger.warning(f"Expected an object for '{name}', got {type(value).__name__}. Section skipped.")
        return None
    return value

def _as_list(value: Any, name: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning(f"Expected a list for '{name}', got {type(value).__name__}. Section skipped.")
        return []
    return value

def _render_elements(
    fields: List[Tuple[str, Union[Element, FieldMap]]],
    record: Dict[str, Any],
    segment_qualifier: Optional[Qualifier],
    force: bool,
) -> Optional[List[str]]:
    """
    Places each field at its position. Absent fields stay as empty placeholders up to the
    highest declared position. Returns None when nothing is set and emission is not forced.
    """
    values: Dict[int, str] = {}
    width = 0
    populated = False
    for name, spec in fields:
        if spec.fmt.derived:
            continue
        width = max(width, spec.position + 1)
        value = record.get(name)
        if _has_value(value):
            values[spec.position] = spec.fmt.to_edi(value)
            populated = True

    if not populated and not force:
        return None

    if segment_qualifier is not None:
        width = max(width, segment_qualifier.position + 1)
        if not values.get(segment_qualifier.position) and segment_qualifier.single_value is not None:
            values[segment_qualifier.position] = segment_qualifier.single_value

    return [values.get(position, '') for position in range(width)]

def _emit_segment_map(node: SegmentMap, value: Any, name: str) -> List[RawSegment]:
    items = _as_list(value, name) if node.many else [value]
    emitted = []
    for item in items:
        record = _as_record(item, name)
        if record is None:
            continue
        elements = _render_elements(list(node.fields.items()), record, node.qualifier, force=True)
        emitted.append((node.segment_id, elements))
    return emitted

def emit_record(
    fields: Dict[str, MapNode],
    record: Dict[str, Any],
    anchor: Optional[str] = None,
    anchor_qualifier: Optional[Qualifier] = None,
) -> List[RawSegment]:
    """
    Inverse of record_mapper.map_loop: emits the segments of one record in field
    specification order. FieldMaps sharing a segment are merged into one segment;
    the anchor (loop sentinel or group anchor) is emitted first and always.
    """
    slots: Dict[Tuple, Any] = {}
    for name, node in fields.items():
        if isinstance(node, FieldMap):
            slots.setdefault(("segment", node.segment_id, node.qualifier), []).append((name, node))
        else:
            slots[("node", name)] = node

    if anchor is not None:
        anchor_keys = [key for key in slots if key[0] == "segment" and key[1] == anchor]
        if not anchor_keys:
            anchor_keys = [("segment", anchor, None)]
            slots[anchor_keys[0]] = []
        # Anchor first, everything else keeps its declaration order.
        slots = {**{key: slots[key] for key in anchor_keys}, **slots}

    emitted: List[RawSegment] = []
    for key, slot in slots.items():
        if key[0] == "segment":
            _, segment_id, segment_qualifier = key
            is_anchor = segment_id == anchor
            if is_anchor and segment_qualifier is None:
                segment_qualifier = anchor_qualifier
            elements = _render_elements(slot, record, segment_qualifier, force=is_anchor)
            if elements is not None:
                emitted.append((segment_id, elements))
        else:
            emitted.extend(_emit_node(key[1], slot, record.get(key[1])))
    return emitted

def _emit_node(name: str, node: MapNode, value: Any) -> List[RawSegment]:
    if isinstance(node, SegmentMap):
        return _emit_segment_map(node, value, name)

    if isinstance(node, GroupMap):
        record = _as_record(value, name)
        if record is None:
            return []
        return emit_record(node.fields, record, anchor=node.anchor)

    if isinstance(node, LoopMap):
        items = _as_list(value, name) if node.many else [value]
        emitted: List[RawSegment] = []
        for item in items:
            record = _as_record(item, name)
            if record is None:
                continue
            emitted.extend(emit_record(node.fields, record, anchor=node.sentinel, anchor_qualifier=node.select))
        return emitted

    raise TypeError(f"Unsupported field specification for '{name}': {type(node).__name__}")

def build_transaction(
    transaction_set_id: str,
    body_fields: Dict[str, MapNode],
    record: Dict[str, Any],
    meta: Optional[Union[BuildMeta, Dict[str, Any]]] = None,
) -> str:
    """
    Builds a complete interchange for one transaction set.

    ISA and GS are emitted only when the record carries them (GE and IEA follow suit);
    ST is always emitted. SE01 is recomputed as body segments + 1, GE01 and IEA01 come
    from `meta`. Counts carried in the record's trailer are ignored.
    """
    if not isinstance(record, dict):
        raise TypeError(f"Structured record must be a dict, got {type(record).__name__}.")
    if not isinstance(meta, BuildMeta):
        meta = BuildMeta.model_validate(meta or {})

    envelope = _as_record(record.get("envelope"), "envelope") or {}
    body = emit_record(body_fields, record)
    body_segments = [build_segment(identifier, elements, meta.field_delimiter) for identifier, elements in body]

    isa = build_isa(envelope, meta)
    gs = build_gs(envelope, meta)
    segments = [isa, gs, build_st(envelope, transaction_set_id, meta)]
    segments.extend(body_segments)
    segments.append(build_se(len(body_segments) + 1, envelope, meta))
    if gs:
        segments.append(build_ge(envelope, meta))
    if isa:
        segments.append(build_iea(envelope, meta))

    logger.info(f"Built {transaction_set_id} transaction with {len(body_segments)} body segments.")
    return assemble_edi(segments, meta.segment_delimiter)
