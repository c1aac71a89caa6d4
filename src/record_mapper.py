import logging
from typing import Any, Dict, FrozenSet, List, NamedTuple, Optional, Sequence, Tuple, Union

from cdm import LoopRange, Segment
from field_formats import TEXT, FieldFormat
from loop_partitioner import partition_by_loop

logger = logging.getLogger(__name__)

# --- Field specifications ---
# Positions are 0-based indexes into Segment.elements (the identifier is not counted),
# so "G62*37*20210102" has the qualifier at 0 and the date at 1.

class Qualifier(NamedTuple):
    """Matches segments whose element at `position` holds one of `values`."""
    position: int
    values: FrozenSet[str]

    def matches(self, segment: Segment) -> bool:
        return segment.element(self.position).strip() in self.values

    @property
    def single_value(self) -> Optional[str]:
        return next(iter(self.values)) if len(self.values) == 1 else None

def qualifier(position: int, *values: str) -> Qualifier:
    return Qualifier(position, frozenset(values))

class Element(NamedTuple):
    """One element of the segment a SegmentMap is built from."""
    position: int
    fmt: FieldFormat = TEXT

class FieldMap(NamedTuple):
    """
    A single-valued field: element `position` of the first `segment_id` segment in scope
    (optionally the first one matching `qualifier`). `fallbacks` are read, in order,
    when the primary position is empty.
    """
    segment_id: str
    position: int
    fmt: FieldFormat = TEXT
    qualifier: Optional[Qualifier] = None
    fallbacks: Tuple[int, ...] = ()

class SegmentMap(NamedTuple):
    """A sub-record built from one segment, or a list of them when `many` is set."""
    segment_id: str
    fields: Dict[str, Element]
    qualifier: Optional[Qualifier] = None
    many: bool = False

class GroupMap(NamedTuple):
    """A nested record over the same scope, present only when `anchor` occurs (always, without one)."""
    fields: Dict[str, Any]
    anchor: Optional[str] = None

class LoopMap(NamedTuple):
    """
    A repeating group starting at `sentinel`. Each occurrence is mapped with `fields`.

    Nested loops (line items in a stop, stops in a transaction) hide their segments from
    the enclosing record and bound its flat loops; flat loops (N1 parties) do neither.
    `select` keeps only occurrences whose sentinel matches; `many=False` keeps the first.
    """
    sentinel: str
    fields: Dict[str, Any]
    terminators: Tuple[str, ...] = ()
    select: Optional[Qualifier] = None
    many: bool = True
    nested: bool = True

MapNode = Union[FieldMap, SegmentMap, GroupMap, LoopMap]

# --- Lookups over an immutable segment sequence ---
def _matches(segment: Segment, segment_id: str, segment_qualifier: Optional[Qualifier]) -> bool:
    if segment.identifier != segment_id:
        return False
    return segment_qualifier is None or segment_qualifier.matches(segment)

def find_segment(segments: Sequence[Segment], scope: Sequence[int], segment_id: str, segment_qualifier: Optional[Qualifier] = None) -> Optional[Segment]:
    """First matching segment in scope; later duplicates are ignored."""
    for i in scope:
        if _matches(segments[i], segment_id, segment_qualifier):
            return segments[i]
    return None

def find_segments(segments: Sequence[Segment], scope: Sequence[int], segment_id: str, segment_qualifier: Optional[Qualifier] = None) -> List[Segment]:
    return [segments[i] for i in scope if _matches(segments[i], segment_id, segment_qualifier)]

def _put(record: Dict[str, Any], name: str, raw: str, fmt: FieldFormat):
    # Empty elements are left out; a non-empty numeric that fails to parse stays as an explicit None.
    if not raw or not raw.strip():
        return
    value = fmt.to_json(raw)
    if value is None and not fmt.numeric:
        return
    record[name] = value

def map_segment(segment: Segment, fields: Dict[str, Element]) -> Dict[str, Any]:
    record: Dict[str, Any] = {}
    for name, element in fields.items():
        _put(record, name, segment.element(element.position), element.fmt)
    return record

class _Scope(NamedTuple):
    segments: Sequence[Segment]
    loop_range: LoopRange
    indices: List[int]
    boundaries: Tuple[str, ...]
    nested_ranges: Dict[str, List[LoopRange]]

def _partition(segments: Sequence[Segment], node: LoopMap, loop_range: LoopRange, boundaries: Tuple[str, ...] = ()) -> List[LoopRange]:
    ranges = partition_by_loop(segments, node.sentinel, loop_range, node.terminators + boundaries)
    if node.select is not None:
        ranges = [r for r in ranges if node.select.matches(segments[r.start_index])]
    return ranges

def _resolve(name: str, node: MapNode, scope: _Scope) -> Tuple[bool, Any]:
    """Returns (present, value) for one field of the record being mapped."""
    segments = scope.segments

    if isinstance(node, FieldMap):
        segment = find_segment(segments, scope.indices, node.segment_id, node.qualifier)
        if segment is None:
            return False, None
        for position in (node.position,) + node.fallbacks:
            raw = segment.element(position)
            if raw.strip():
                return True, node.fmt.to_json(raw)
        return False, None

    if isinstance(node, SegmentMap):
        if node.many:
            return True, [map_segment(s, node.fields) for s in find_segments(segments, scope.indices, node.segment_id, node.qualifier)]
        segment = find_segment(segments, scope.indices, node.segment_id, node.qualifier)
        return True, map_segment(segment, node.fields) if segment is not None else None

    if isinstance(node, GroupMap):
        if node.anchor is not None and find_segment(segments, scope.indices, node.anchor) is None:
            return True, None
        return True, _map_fields(node.fields, scope)

    if isinstance(node, LoopMap):
        if node.nested:
            ranges = scope.nested_ranges[name]
        else:
            # Flat loops only start on segments that belong to this record and stop at nested loop boundaries.
            own = set(scope.indices)
            ranges = [r for r in _partition(segments, node, scope.loop_range, scope.boundaries) if r.start_index in own]
        records = [map_loop(segments, r, node.fields) for r in ranges]
        logger.debug(f"Loop '{name}' ({node.sentinel}): {len(records)} occurrence(s).")
        if node.many:
            return True, records
        return True, records[0] if records else None

    raise TypeError(f"Unsupported field specification for '{name}': {type(node).__name__}")

def _map_fields(fields: Dict[str, MapNode], scope: _Scope) -> Dict[str, Any]:
    record: Dict[str, Any] = {}
    for name, node in fields.items():
        present, value = _resolve(name, node, scope)
        if present:
            record[name] = value
    return record

def map_loop(segments: Sequence[Segment], loop_range: LoopRange, fields: Dict[str, MapNode]) -> Dict[str, Any]:
    """
    Maps the segments of one loop occurrence to a record.

    Nested child loops are partitioned inside `loop_range` first; their segments are
    excluded from this record's own fields, so a stop's references never pick up the
    L11s of its line items.
    """
    nested_ranges: Dict[str, List[LoopRange]] = {}
    for name, node in fields.items():
        if isinstance(node, LoopMap) and node.nested:
            nested_ranges[name] = _partition(segments, node, loop_range)

    hidden = set()
    for ranges in nested_ranges.values():
        for r in ranges:
            hidden.update(r.indices())

    boundaries = tuple(node.sentinel for node in fields.values() if isinstance(node, LoopMap) and node.nested)
    scope = _Scope(
        segments=segments,
        loop_range=loop_range,
        indices=[i for i in loop_range.indices() if i not in hidden],
        boundaries=boundaries,
        nested_ranges=nested_ranges,
    )
    return _map_fields(fields, scope)
