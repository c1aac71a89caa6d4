"""
X12 EDI <-> JSON command line tool

Usage:
    edi-x12-json parse load_tender.edi                    # Print the record to stdout
    edi-x12-json parse status.edi out.json --type 214      # Force the 214 template
    edi-x12-json build 204 load_tender.json out.edi        # Render a record back to EDI
    edi-x12-json templates                                 # List supported transaction sets
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from conversion_service import EDIConversionService, ErrorResponse

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s:%(lineno)d] - %(message)s"

def _write_output(content: str, output_file: Optional[str]):
    if output_file is None:
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")
        return
    Path(output_file).write_text(content)
    logger.info(f"Output saved to: {output_file} ({len(content):,} characters)")

def _report_error(result: ErrorResponse) -> int:
    print(f"Error: {result.error}", file=sys.stderr)
    if result.message:
        print(f"  {result.message}", file=sys.stderr)
    if result.available_types:
        print(f"  Available types: {', '.join(result.available_types)}", file=sys.stderr)
    return 1

def parse_command(args: argparse.Namespace, service: EDIConversionService) -> int:
    edi_content = Path(args.input_file).read_text()
    logger.info(f"Loaded {len(edi_content)} characters from {args.input_file}")

    result = service.parse_edi(edi_content, args.type)
    if isinstance(result, ErrorResponse):
        return _report_error(result)

    output = json.dumps(result.to_json_dict() if args.full else result.data, indent=2)
    _write_output(output, args.output_file)
    return 0

def build_command(args: argparse.Namespace, service: EDIConversionService) -> int:
    with open(args.input_file, 'r') as f:
        data = json.load(f)

    meta = {}
    if args.field_delimiter:
        meta["fieldDelimiter"] = args.field_delimiter
    if args.segment_delimiter:
        meta["segmentDelimiter"] = args.segment_delimiter

    result = service.build_edi(args.type, data, meta)
    if isinstance(result, ErrorResponse):
        return _report_error(result)

    _write_output(result.edi, args.output_file)
    return 0

def templates_command(args: argparse.Namespace, service: EDIConversionService) -> int:
    for template in service.list_templates().templates:
        print(f"{template.id}\t{template.name}")
    return 0

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edi-x12-json",
        description="Convert X12 transportation EDI (204, 214) to JSON and back",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    parse_parser = subparsers.add_parser('parse', help='Parse an EDI file to JSON')
    parse_parser.add_argument('input_file', help='Input EDI file')
    parse_parser.add_argument('output_file', nargs='?', help='Output JSON file (default: stdout)')
    parse_parser.add_argument('--type', help='Transaction set to parse as (default: detected from ST01)')
    parse_parser.add_argument('--full', action='store_true',
                              help='Write the whole response (detected type, segment count) instead of the record only')
    parse_parser.set_defaults(handler=parse_command)

    build_parser = subparsers.add_parser('build', help='Build an EDI file from a JSON record')
    build_parser.add_argument('type', help='Transaction set id (e.g. 204)')
    build_parser.add_argument('input_file', help='Input JSON file')
    build_parser.add_argument('output_file', nargs='?', help='Output EDI file (default: stdout)')
    build_parser.add_argument('--field-delimiter', help="Element delimiter (default: '*')")
    build_parser.add_argument('--segment-delimiter', help="Segment terminator (default: '~')")
    build_parser.set_defaults(handler=build_command)

    templates_parser = subparsers.add_parser('templates', help='List supported transaction sets')
    templates_parser.set_defaults(handler=templates_command)

    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with command line argument parsing."""
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)

    try:
        return args.handler(args, EDIConversionService())
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Input is not valid JSON: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
