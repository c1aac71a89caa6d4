import logging
import math
from typing import Any, Callable, Dict, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]

# --- Qualifier code tables ---
DATE_QUALIFIERS: Dict[str, str] = {
    '37': 'Requested Ship Date',
    '38': 'Requested Delivery Date',
    '53': 'Delivered Date',
    '54': 'Last Delivery Date',
    '64': 'Tender Date',
    '69': 'Promised Delivery Date',
    '70': 'Scheduled Ship Date',
    '76': 'Actual Ship Date',
    '77': 'Actual Delivery Date',
}

STOP_REASON_CODES: Dict[str, str] = {
    'CL': 'Pickup',
    'CU': 'Delivery',
    'PL': 'Partial Load',
    'PU': 'Partial Unload',
}

ENTITY_ID_CODES: Dict[str, str] = {
    'BT': 'Bill To',
    'BY': 'Buyer',
    'CA': 'Carrier',
    'CN': 'Consignee',
    'CR': 'Customer',
    'DE': 'Depositor',
    'PA': 'Party to Receive Documents',
    'PF': 'Party to Receive Freight Bill',
    'SE': 'Seller',
    'SF': 'Ship From',
    'SH': 'Shipper',
    'ST': 'Ship To',
    'WH': 'Warehouse',
}

# --- Text ---
def trim_field(value: Optional[str]) -> str:
    return value.strip() if value else ''

def pad_right(value: Any, width: int) -> str:
    """Left-justifies to a fixed width; longer values are truncated."""
    text = '' if value is None else str(value)
    return text.ljust(width)[:width]

# --- Dates and times ---
def format_date(value: str) -> str:
    """CCYYMMDD -> CCYY-MM-DD. Anything shorter is returned unchanged."""
    if not value or len(value) < 8:
        return value
    return f"{value[:4]}-{value[4:6]}-{value[6:8]}"

def format_time(value: str) -> str:
    """HHMM -> HH:MM, left-padding short values ('900' -> '09:00')."""
    if not value:
        return value
    padded = value.zfill(4)
    return f"{padded[:2]}:{padded[2:4]}"

def unformat_date(value: Any) -> str:
    return str(value).replace('-', '') if value else ''

def unformat_time(value: Any) -> str:
    return str(value).replace(':', '') if value else ''

# --- Numbers ---
def parse_number(value: Optional[str]) -> Optional[Number]:
    """
    Lenient numeric conversion. Empty or unparsable input yields None instead of raising,
    so one malformed quantity cannot abort a whole conversion.
    Integral text is returned as int, everything else as float.
    """
    if not value or not value.strip():
        return None
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        logger.warning(f"Unparsable numeric value '{text}'; using null.")
        return None
    if not math.isfinite(number):
        logger.warning(f"Non-finite numeric value '{text}'; using null.")
        return None
    return number

def parse_integer(value: Optional[str]) -> Optional[int]:
    number = parse_number(value)
    if number is None:
        return None
    return int(number)

def format_number(value: Any) -> str:
    if value is None or value == '':
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

# --- Field formats used by the record mapper and builder ---
class FieldFormat(NamedTuple):
    """
    Converts one raw element to its JSON value and back.
    A format without `to_edi` is derived from another field and is never emitted.
    """
    name: str
    to_json: Callable[[str], Any]
    to_edi: Optional[Callable[[Any], str]]
    numeric: bool = False

    @property
    def derived(self) -> bool:
        return self.to_edi is None

def _render_text(value: Any) -> str:
    return '' if value is None else str(value)

TEXT = FieldFormat('text', trim_field, _render_text)
DATE = FieldFormat('date', lambda raw: format_date(trim_field(raw)), unformat_date)
TIME = FieldFormat('time', lambda raw: format_time(trim_field(raw)), unformat_time)
NUMBER = FieldFormat('number', parse_number, format_number, numeric=True)
INTEGER = FieldFormat('integer', parse_integer, format_number, numeric=True)

def lookup(table: Dict[str, str], name: str) -> FieldFormat:
    """A derived format expanding a qualifier code to its readable name, falling back to the code."""
    return FieldFormat(f'lookup:{name}', lambda raw: table.get(trim_field(raw), trim_field(raw)), None)

DATE_QUALIFIER_NAME = lookup(DATE_QUALIFIERS, 'date_qualifier')
STOP_TYPE = lookup(STOP_REASON_CODES, 'stop_reason')
ENTITY_ID_NAME = lookup(ENTITY_ID_CODES, 'entity_id')
