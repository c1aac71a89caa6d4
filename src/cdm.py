from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple

# Canonical Data Model (CDM) for a tokenized X12 document.
# Segments and ranges are frozen: downstream structures only hold references
# and index ranges into ParsedDocument.segments, never copies.

class Segment(BaseModel):
    """Represents a single EDI segment."""
    model_config = ConfigDict(frozen=True)

    identifier: str
    elements: Tuple[str, ...] = ()
    raw_text: str = ""

    def element(self, position: int) -> str:
        """Returns the element at a 0-based position, or '' when the segment is shorter."""
        if 0 <= position < len(self.elements):
            return self.elements[position]
        return ""

class LoopRange(BaseModel):
    """Half-open [start_index, end_index) interval into a segment sequence."""
    model_config = ConfigDict(frozen=True)

    start_index: int
    end_index: int

    def indices(self) -> range:
        return range(self.start_index, self.end_index)

class ParsedDocument(BaseModel):
    """All segments of one EDI document plus the delimiters they were split with."""
    model_config = ConfigDict(frozen=True)

    segments: Tuple[Segment, ...] = ()
    field_delimiter: str = "*"
    segment_delimiter: str = "~"
    component_separator: str = ">"

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def full_range(self) -> LoopRange:
        return LoopRange(start_index=0, end_index=len(self.segments))

    def find_segment(self, identifier: str, start_index: int = 0) -> Optional[int]:
        for i in range(start_index, len(self.segments)):
            if self.segments[i].identifier == identifier:
                return i
        return None

    @property
    def transaction_set_id(self) -> Optional[str]:
        """ST01 of the first transaction set header, if any."""
        st_index = self.find_segment("ST")
        if st_index is None:
            return None
        return self.segments[st_index].element(0).strip() or None

    def body_range(self) -> LoopRange:
        """
        The segments strictly between the first ST and its SE.
        Falls back to the whole document when the transaction envelope is incomplete.
        """
        st_index = self.find_segment("ST")
        if st_index is None:
            return self.full_range()
        se_index = self.find_segment("SE", st_index + 1)
        end_index = se_index if se_index is not None else len(self.segments)
        return LoopRange(start_index=st_index + 1, end_index=end_index)

class BuildMeta(BaseModel):
    """Output options for the builder; accepts camelCase (JSON) or snake_case keys."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    field_delimiter: str = Field("*", alias="fieldDelimiter", min_length=1, max_length=1)
    segment_delimiter: str = Field("~", alias="segmentDelimiter", min_length=1, max_length=1)
    component_separator: str = Field(">", alias="componentSeparator", min_length=1, max_length=1)
    transaction_count: int = Field(1, alias="transactionCount", ge=0)
    group_count: int = Field(1, alias="groupCount", ge=0)
