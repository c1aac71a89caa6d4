import logging
from typing import Any, Dict, Optional, Union

from cdm import BuildMeta, ParsedDocument
from edi_builder import build_transaction
from envelope import extract_envelope, extract_trailer
from record_mapper import MapNode, map_loop

logger = logging.getLogger(__name__)

class TransactionTemplate:
    """
    Maps one transaction set to and from its structured record.

    `body_fields` describes everything between ST and SE; the envelope and trailer
    sections are common to every template and are added around it.
    """

    def __init__(self, transaction_set_id: str, name: str, body_fields: Dict[str, MapNode]):
        self.transaction_set_id = transaction_set_id
        self.name = name
        self.body_fields = body_fields

    def __repr__(self) -> str:
        return f"TransactionTemplate({self.transaction_set_id!r}, {self.name!r})"

    def parse(self, document: ParsedDocument) -> Dict[str, Any]:
        logger.info(f"=== MAPPING TRANSACTION SET {self.transaction_set_id} ({len(document.segments)} segments) ===")
        body = map_loop(document.segments, document.body_range(), self.body_fields)
        return {
            "envelope": extract_envelope(document),
            **body,
            "trailer": extract_trailer(document),
        }

    def build(self, record: Dict[str, Any], meta: Optional[Union[BuildMeta, Dict[str, Any]]] = None) -> str:
        return build_transaction(self.transaction_set_id, self.body_fields, record, meta)
