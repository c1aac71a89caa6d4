from typing import Any, Dict, List, Optional, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cdm import BuildMeta
from edi_errors import InvalidEdiInputError, UndeterminedTransactionError, UnsupportedTransactionError
from edi_parser import tokenize
from template_registry import TemplateRegistry, default_registry

logger = logging.getLogger(__name__)

# Response payloads; dumped with by_alias=True they match the JSON a host serves.

class _Response(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

class ParseResponse(_Response):
    success: bool = True
    detected_type: Optional[str] = Field(None, alias="detectedType")
    used_type: str = Field(..., alias="usedType")
    segment_count: int = Field(..., alias="segmentCount")
    data: Dict[str, Any]

    def to_json_dict(self) -> Dict[str, Any]:
        # detectedType is reported even when no ST segment was found.
        return self.model_dump(by_alias=True)

class BuildResponse(_Response):
    edi: str

class TemplateInfo(_Response):
    id: str
    name: str

class TemplatesResponse(_Response):
    templates: List[TemplateInfo]

class ErrorResponse(_Response):
    """Failure payload. `status_code` is the HTTP status a host should answer with; it is not serialized."""
    error: str
    message: Optional[str] = None
    detected_type: Optional[str] = Field(None, alias="detectedType")
    available_types: Optional[List[str]] = Field(None, alias="availableTypes")
    status_code: int = Field(400, exclude=True)

def _require_edi_text(edi_content: Any) -> str:
    if not edi_content or not isinstance(edi_content, str):
        raise InvalidEdiInputError("Provide EDI content as raw text or { edi: string }")
    if "ISA" not in edi_content:
        raise InvalidEdiInputError("EDI content must contain an ISA segment", reason="Invalid EDI format")
    return edi_content

class EDIConversionService:
    """Parse/build entry points for hosts (HTTP handlers, the CLI) over a template registry."""

    def __init__(self, registry: Optional[TemplateRegistry] = None):
        self.registry = registry or default_registry()

    def list_templates(self) -> TemplatesResponse:
        return TemplatesResponse(templates=[TemplateInfo(**t) for t in self.registry.list_templates()])

    def parse_edi(self, edi_content: Any, transaction_type: Optional[str] = None) -> Union[ParseResponse, ErrorResponse]:
        """
        Converts raw EDI text to its structured record.

        Args:
            edi_content: The EDI document content
            transaction_type: Template to use instead of the one detected from ST01

        Returns:
            ParseResponse, or ErrorResponse describing why the input was rejected
        """
        try:
            edi_content = _require_edi_text(edi_content)
            logger.info(f"Starting EDI parse (requested type: {transaction_type or 'auto'})")
            document = tokenize(edi_content)
            detected_type, used_type, data = self.registry.parse_document(document, transaction_type)
            logger.info(f"Parse completed: detected={detected_type}, used={used_type}, segments={len(document.segments)}")
            return ParseResponse(
                detected_type=detected_type,
                used_type=used_type,
                segment_count=len(document.segments),
                data=data,
            )
        except InvalidEdiInputError as e:
            return ErrorResponse(error=e.reason, message=str(e))
        except UndeterminedTransactionError as e:
            return ErrorResponse(error="Unable to determine EDI type", message=str(e))
        except UnsupportedTransactionError as e:
            return ErrorResponse(
                error="Unsupported EDI type",
                message=str(e),
                detected_type=e.detected_type,
                available_types=e.available_types,
            )
        except Exception as e:
            logger.error(f"EDI parse failed: {e}", exc_info=True)
            return ErrorResponse(error="Parse error", message=str(e), status_code=500)

    def build_edi(
        self,
        transaction_type: Optional[str],
        data: Any,
        meta: Optional[Union[BuildMeta, Dict[str, Any]]] = None,
    ) -> Union[BuildResponse, ErrorResponse]:
        """Renders a structured record back to EDI text with the template for `transaction_type`."""
        template = self.registry.get_template(transaction_type)
        if template is None:
            logger.warning(f"Build requested for unsupported transaction set: {transaction_type}")
            return ErrorResponse(error="Unsupported type", available_types=self.registry.list_ids())
        if not isinstance(data, dict):
            return ErrorResponse(error="Invalid input", message="Provide the structured record as a JSON object")

        try:
            build_meta = meta if isinstance(meta, BuildMeta) else BuildMeta.model_validate(meta or {})
        except ValidationError as e:
            return ErrorResponse(error="Invalid build options", message=str(e))

        try:
            edi = template.build(data, build_meta)
            return BuildResponse(edi=edi)
        except Exception as e:
            logger.error(f"EDI build failed: {e}", exc_info=True)
            return ErrorResponse(error="Build error", message=str(e), status_code=500)
