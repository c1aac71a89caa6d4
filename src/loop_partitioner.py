import logging
from typing import Iterable, List, Optional, Sequence

from cdm import LoopRange, Segment

logger = logging.getLogger(__name__)

def _bounds(segments: Sequence[Segment], loop_range: Optional[LoopRange]) -> LoopRange:
    if loop_range is None:
        return LoopRange(start_index=0, end_index=len(segments))
    return LoopRange(start_index=max(loop_range.start_index, 0), end_index=min(loop_range.end_index, len(segments)))

def find_first(segments: Sequence[Segment], identifier: str, loop_range: Optional[LoopRange] = None) -> Optional[int]:
    bounds = _bounds(segments, loop_range)
    for i in bounds.indices():
        if segments[i].identifier == identifier:
            return i
    return None

def partition_by_loop(
    segments: Sequence[Segment],
    sentinel_id: str,
    loop_range: Optional[LoopRange] = None,
    terminators: Iterable[str] = (),
) -> List[LoopRange]:
    """
    Slices `loop_range` into one LoopRange per occurrence of `sentinel_id`.

    Each range starts at a sentinel and ends before whichever comes first: the next
    sentinel, the next terminator segment (e.g. 'L3' closes the stop list) or the end
    of `loop_range`. The result is ordered, disjoint and contains every sentinel exactly
    once. No sentinel means an empty list.
    """
    bounds = _bounds(segments, loop_range)
    stop_ids = set(terminators)
    stop_ids.discard(sentinel_id)

    ranges: List[LoopRange] = []
    start: Optional[int] = None
    for i in bounds.indices():
        identifier = segments[i].identifier
        if identifier == sentinel_id:
            if start is not None:
                ranges.append(LoopRange(start_index=start, end_index=i))
            start = i
        elif start is not None and identifier in stop_ids:
            ranges.append(LoopRange(start_index=start, end_index=i))
            start = None
    if start is not None:
        ranges.append(LoopRange(start_index=start, end_index=bounds.end_index))

    logger.debug(f"Partitioned [{bounds.start_index}, {bounds.end_index}) by '{sentinel_id}' into {len(ranges)} range(s).")
    return ranges
