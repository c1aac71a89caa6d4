import pytest
import sys
import os
import logging

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from template_registry import TemplateRegistry, default_registry

# ==============================================================================
# PYTEST CONFIGURATION & HOOKS
# ==============================================================================

def pytest_configure(config):
    """Configure pytest settings and markers."""
    config.addinivalue_line("markers", "unit: Pure unit tests with no external dependencies.")
    config.addinivalue_line("markers", "integration: End-to-end conversions across several modules.")

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment(pytestconfig):
    """Set up test environment with logging configuration."""
    # Use pytest's log_cli_level if available, otherwise default to INFO
    log_level = pytestconfig.getoption("log_cli_level") or "INFO"
    logging.basicConfig(
        level=log_level.upper(),
        format="[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.info(f"Test logging configured with level: {log_level.upper()}")
    yield

# ==============================================================================
# SHARED FIXTURES
# ==============================================================================

# Fixed-width ISA: '*' at offset 3, ISA16 '>' at 104, '~' at 105.
ISA_HEADER = "ISA*00*          *00*          *ZZ*SENDERID       *ZZ*RECEIVERID     *240715*1200*U*00401*000000001*0*P*>~"

@pytest.fixture(scope="session")
def registry() -> TemplateRegistry:
    return default_registry()

@pytest.fixture(scope="session")
def isa_header() -> str:
    return ISA_HEADER

@pytest.fixture(scope="session")
def minimal_204_edi_string() -> str:
    """The abbreviated load tender: one pickup stop with a shipper and one line item."""
    return (
        "ISA*00*...*ZZ*SENDER...*ZZ*RECEIVER...*210101*1200*U*00401*000000001*0*P*>~"
        "GS*SM*SENDER*RECEIVER*210101*1200*1*X*004010~"
        "ST*204*0001~"
        "B2**SCAC*SHIP123**PP~"
        "S5*1*CL~"
        "G62*37*20210102~"
        "N1*SH*Acme Corp~"
        "N3*123 Main St~"
        "N4*Chicago*IL*60601~"
        "L5**Widgets~"
        "AT8*G*LB*500~"
        "SE*9*0001~"
        "GE*1*1~"
        "IEA*1*000000001~"
    )

@pytest.fixture(scope="session")
def valid_204_edi_string() -> str:
    """
    A complete 204 load tender, one segment per line.

    Contains:
    - Header: B2, B2A, 2 L11, G62, AT5
    - Bill-to party (N1*BT with N3/N4)
    - Stop 1 (pickup): L11, G62, AT8, shipper party, 2 line items (the first with AT8, L11, G61 and hazmat)
    - Stop 2 (delivery): G62, consignee party, 1 line item
    - L3 totals
    """
    return f"""
{ISA_HEADER}
GS*SM*SENDERID*RECEIVERID*20240715*1200*1*X*004010~
ST*204*0001~
B2**SCAC**SHIP123**PP~
B2A*00*LT~
L11*REF001*BM~
L11*PO555*PO*PURCHASE ORDER~
G62*64*20240715*1*0900~
AT5*HM~
N1*BT*ACME BILLING*93*BT001~
N3*100 BILL ST~
N4*BILLTOWN*TX*75001*US~
S5*1*CL~
L11*PU001*PU~
G62*37*20240716*I*800~
AT8*G*L*1000**5~
N1*SH*SHIPPER INC*93*SH001~
N3*1 DOCK RD*SUITE 4~
N4*DALLAS*TX*75201*US~
L5*1*WIDGETS*12345*N~
AT8*G*L*600**3~
L11*LI001*LI~
G61*IC*JOHN DOE*TE*5551234~
LH1*PC*2*UN1993*******II~
LH2*3~
LH3*FLAMMABLE LIQUID*D*N~
LFH*TEC*KEEP UPRIGHT~
L5*2*GADGETS~
S5*2*CU~
G62*38*20240717~
N1*CN*RECEIVER CO*93*CN001~
N3*9 MAIN ST~
N4*AUSTIN*TX*73301*US~
L5*1*WIDGETS~
L3*1000*G*1500*FR*1500.50~
SE*33*0001~
GE*1*1~
IEA*1*000000001~
""".strip()

@pytest.fixture(scope="session")
def valid_214_edi_string() -> str:
    """A 214 shipment status with a shipper party and two status stops (the first with two AT7 events)."""
    return f"""
{ISA_HEADER}
GS*QM*SENDERID*RECEIVERID*20240715*1200*2*X*004010~
ST*214*0002~
B10*REF9*SHIP123*SCAC*M~
L11*PO555*PO~
AT5*HM~
N1*SH*SHIPPER INC*93*SH001~
N3*1 DOCK RD~
N4*DALLAS*TX*75201*US~
LX*1~
AT7*X3*20240716*0830~
AT7*AF*20240716*1015~
MS1*DALLAS*TX*US~
AT8*G*L*1000**5~
L11*PU001*PU~
LX*2~
AT7*X1*20240717*1400*950~
MS1*AUSTIN*TX*US~
SE*16*0002~
GE*1*2~
IEA*1*000000001~
""".strip()

@pytest.fixture(scope="session")
def unsupported_850_edi_string() -> str:
    return f"""
{ISA_HEADER}
GS*PO*SENDERID*RECEIVERID*20240715*1200*3*X*004010~
ST*850*0003~
BEG*00*SA*PO123**20240715~
PO1*1*10*EA*9.99**VP*ITEM1~
SE*4*0003~
GE*1*3~
IEA*1*000000001~
""".strip()
