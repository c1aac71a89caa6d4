import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import edi204_template
import edi214_template
from cdm import ParsedDocument
from edi_errors import UndeterminedTransactionError, UnsupportedTransactionError
from transaction_template import TransactionTemplate

logger = logging.getLogger(__name__)

class TemplateRegistry:
    """
    Read-only table of transaction templates keyed by transaction set id.
    Built once at start-up and handed to whoever needs it; never mutated afterwards.
    """

    def __init__(self, templates: Iterable[TransactionTemplate]):
        self._templates: Dict[str, TransactionTemplate] = {}
        for template in templates:
            if template.transaction_set_id in self._templates:
                raise ValueError(f"Duplicate template for transaction set {template.transaction_set_id}")
            self._templates[template.transaction_set_id] = template
        logger.info(f"Template registry initialized with: {', '.join(self._templates) or 'no templates'}")

    def get_template(self, transaction_set_id: Optional[str]) -> Optional[TransactionTemplate]:
        """
        Get the template for a transaction set.

        Args:
            transaction_set_id: ST01 value (e.g., "204")

        Returns:
            TransactionTemplate or None if not registered
        """
        if transaction_set_id is None:
            return None
        return self._templates.get(transaction_set_id)

    def has_template(self, transaction_set_id: Optional[str]) -> bool:
        return self.get_template(transaction_set_id) is not None

    def list_ids(self) -> List[str]:
        return list(self._templates)

    def list_templates(self) -> List[Dict[str, str]]:
        return [{"id": template_id, "name": template.name} for template_id, template in self._templates.items()]

    def parse_document(self, document: ParsedDocument, requested_type: Optional[str] = None) -> Tuple[Optional[str], str, Dict[str, Any]]:
        """
        Maps a tokenized document with the template for `requested_type`, or for the
        transaction set detected from its ST segment.

        Returns:
            (detected type, used type, structured record)

        Raises:
            UndeterminedTransactionError: nothing requested and no ST segment
            UnsupportedTransactionError: no template for the type to use
        """
        detected_type = document.transaction_set_id
        transaction_type = requested_type or detected_type
        if not transaction_type:
            raise UndeterminedTransactionError()

        template = self.get_template(transaction_type)
        if template is None:
            logger.warning(f"No template for transaction set {transaction_type} (detected: {detected_type}).")
            raise UnsupportedTransactionError(transaction_type, detected_type, self.list_ids())

        return detected_type, transaction_type, template.parse(document)

def default_registry() -> TemplateRegistry:
    return TemplateRegistry([edi204_template.TEMPLATE, edi214_template.TEMPLATE])

def parse_document(document: ParsedDocument, registry: TemplateRegistry, requested_type: Optional[str] = None) -> Tuple[Optional[str], str, Dict[str, Any]]:
    return registry.parse_document(document, requested_type)
