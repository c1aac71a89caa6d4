import logging
from typing import List, Optional, Tuple

from cdm import ParsedDocument, Segment

logger = logging.getLogger(__name__)

DEFAULT_ELEMENT_DELIMITER = '*'
DEFAULT_SEGMENT_TERMINATOR = '~'
DEFAULT_COMPONENT_SEPARATOR = '>'

# ISA carries 16 elements; the segment terminator follows the 1-character ISA16.
ISA_ELEMENT_COUNT = 16
ISA_TERMINATOR_OFFSET = 105

def normalize_line_endings(edi_string: str) -> str:
    return edi_string.replace('\r\n', '\n').replace('\r', '\n')

class EdiParser:
    """
    Splits raw X12 text into segments.

    Delimiters are detected once from the ISA header: the element delimiter is the
    character at offset 3, the component separator is ISA16 and the segment terminator
    the character right after it (offsets 104 and 105 for a fixed-width header).
    Input without an ISA header falls back to '*' and '~', or line breaks when the
    content holds no '~' at all.
    """

    def __init__(self, edi_string: str):
        if not isinstance(edi_string, str):
            raise TypeError(f"EDI content must be a string, got {type(edi_string).__name__}.")

        # Normalize first so '\r\n' can never be mistaken for a terminator.
        self.edi_content = normalize_line_endings(edi_string)
        delims = self._detect_delimiters(self.edi_content)
        self.element_delimiter, self.segment_terminator, self.component_separator = delims

    def _detect_delimiters(self, edi_content: str) -> Tuple[str, str, str]:
        clean_edi = edi_content.lstrip()
        if clean_edi.startswith('ISA') and len(clean_edi) > 3:
            element_delimiter = clean_edi[3]
            # Positions are fixed in the X12 standard; counting elements covers unpadded headers.
            for terminator_offset in (ISA_TERMINATOR_OFFSET, self._find_isa_terminator_offset(clean_edi, element_delimiter)):
                if self._is_plausible_terminator(clean_edi, terminator_offset, element_delimiter):
                    segment_terminator = clean_edi[terminator_offset]
                    component_separator = clean_edi[terminator_offset - 1]
                    logger.debug(f"Delimiters detected: Element='{element_delimiter}', Segment={segment_terminator!r}, Component='{component_separator}'")
                    return element_delimiter, segment_terminator, component_separator
            logger.warning(f"Could not locate the ISA segment terminator. Using element delimiter '{element_delimiter}' with the default segment terminator.")
            return element_delimiter, self._default_terminator(clean_edi), DEFAULT_COMPONENT_SEPARATOR

        logger.warning("Could not find standard ISA segment. Falling back to default delimiters ('*', '~', '>').")
        return DEFAULT_ELEMENT_DELIMITER, self._default_terminator(clean_edi), DEFAULT_COMPONENT_SEPARATOR

    @staticmethod
    def _find_isa_terminator_offset(clean_edi: str, element_delimiter: str) -> Optional[int]:
        seen = 0
        for offset, char in enumerate(clean_edi):
            if char == element_delimiter:
                seen += 1
                if seen == ISA_ELEMENT_COUNT:
                    return offset + 2
        return None

    @staticmethod
    def _is_plausible_terminator(clean_edi: str, offset: Optional[int], element_delimiter: str) -> bool:
        if offset is None or offset >= len(clean_edi):
            return False
        # ISA16 sits between the last element delimiter and the terminator.
        if offset < 2 or clean_edi[offset - 2] != element_delimiter:
            return False
        char = clean_edi[offset]
        return not char.isalnum() and char not in (element_delimiter, ' ')

    @staticmethod
    def _default_terminator(edi_content: str) -> str:
        if DEFAULT_SEGMENT_TERMINATOR in edi_content:
            return DEFAULT_SEGMENT_TERMINATOR
        return '\n'

    def _segmentize(self) -> List[Segment]:
        segments = []
        for seg_str in self.edi_content.split(self.segment_terminator):
            clean_seg = seg_str.strip()
            if not clean_seg: continue

            parts = clean_seg.split(self.element_delimiter)
            segments.append(Segment(identifier=parts[0], elements=tuple(parts[1:]), raw_text=clean_seg))
        return segments

    def tokenize(self) -> ParsedDocument:
        segments = self._segmentize()
        logger.debug(f"Tokenized {len(segments)} segments.")
        if not segments:
            logger.info("No EDI segments found in input.")
        return ParsedDocument(
            segments=tuple(segments),
            field_delimiter=self.element_delimiter,
            segment_delimiter=self.segment_terminator,
            component_separator=self.component_separator,
        )

def tokenize(edi_string: str) -> ParsedDocument:
    """Tokenizes raw EDI text. Empty or unrecognizable input yields a document with zero segments."""
    return EdiParser(edi_string).tokenize()
