# ============================================================================
# src/bloodwork_analysis/cli.py
# ============================================================================
"""
Command line entry point: bloodwork-analyze

Examples:
    bloodwork-analyze report.pdf --panel cbc --age 45 --sex male
    bloodwork-analyze --panel lipid --age 52 --sex female \\
        --value total_cholesterol=5.8mmol/L --value hdl_cholesterol=38
    bloodwork-analyze photo.jpg --panel cbc --value hemoglobin=11.9 --narrative

Age and sex fall back to what the report header says when not given.
The analysis is printed to stdout as JSON; logs go to stderr.
"""

import argparse
import asyncio
import json
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import logging_settings
from .core.context import ManualEntry, PatientContext
from .core.pipeline import AnalysisPipeline
from .narrative.llm_generator import LLMNarrativeGenerator
from .utils.exceptions import BloodworkError
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

_VALUE = re.compile(r"^\s*(?P<number>[-+]?\d+(?:\.\d+)?)\s*(?P<unit>.*?)\s*$")


def parse_manual_value(text: str) -> ManualEntry:
    """
    Parse "parameter=value[unit]", e.g. "glucose=5.4mmol/L" or "wbc=7.5".

    Raises:
        argparse.ArgumentTypeError: text has no "=" or no parameter id
    """
    parameter_id, sep, rest = text.partition("=")
    parameter_id = parameter_id.strip().lower()
    if not sep or not parameter_id:
        raise argparse.ArgumentTypeError(f"expected parameter=value[unit], got '{text}'")

    match = _VALUE.match(rest)
    if match is None:
        # Left to the validation engine to reject with a proper error
        return ManualEntry(parameter_id=parameter_id, value=rest.strip())
    return ManualEntry(
        parameter_id=parameter_id,
        value=match.group("number"),
        unit=match.group("unit") or None,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bloodwork-analyze",
        description="Extract and classify blood test results from a report or typed-in values",
    )
    parser.add_argument("report", nargs="?", type=Path, help="PDF or image of the lab report")
    parser.add_argument("--panel", required=True, help="Test panel (cbc, lipid, glucose, thyroid, ...)")
    parser.add_argument("--age", type=int, help="Patient age in years")
    parser.add_argument("--sex", choices=["male", "female"], help="Patient sex")
    parser.add_argument("--condition", action="append", default=[], help="Known condition (repeatable)")
    parser.add_argument(
        "--value",
        action="append",
        default=[],
        type=parse_manual_value,
        metavar="ID=VALUE[UNIT]",
        help="Manual value, overrides the report (repeatable)",
    )
    parser.add_argument("--narrative", action="store_true", help="Ask the configured LLM for the summary")
    parser.add_argument("--log-level", default=logging_settings.LOG_LEVEL, help="Logging level")
    parser.add_argument("--json-logs", action="store_true", default=logging_settings.LOG_JSON,
                        help="Emit logs as JSON lines")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_patient(args: argparse.Namespace, demographics: dict) -> PatientContext:
    age = args.age if args.age is not None else demographics.get("age")
    sex = args.sex or demographics.get("sex")
    if age is None or sex is None:
        raise ValueError("Patient age and sex are required (--age/--sex) and were not found on the report")
    return PatientContext.create(age=age, sex=sex, conditions=args.condition)


async def run(args: argparse.Namespace, pipeline: Optional[AnalysisPipeline] = None) -> dict:
    pipeline = pipeline or AnalysisPipeline()
    entries: List[ManualEntry] = args.value

    if args.report is not None:
        extraction = await pipeline.extract_document(args.report, args.panel, require_parameters=not entries)
        patient = resolve_patient(args, extraction.demographics)
        analysis = pipeline.analyze_extraction(extraction, patient, entries)
    else:
        if not entries:
            raise ValueError("Nothing to analyze: give a report file or at least one --value")
        patient = resolve_patient(args, {})
        analysis = pipeline.analyze(args.panel, patient, entries)

    if args.narrative:
        await pipeline.narrate(analysis, LLMNarrativeGenerator())

    return analysis.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, format_json=args.json_logs)

    try:
        output = asyncio.run(run(args))
    except BloodworkError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(json.dumps(
            {"error": type(e).__name__, "message": str(e), "recovery": e.recovery},
            ensure_ascii=False,
            indent=2,
        ))
        return 1
    except ValueError as e:
        logger.error(str(e))
        print(json.dumps({"error": "InvalidInput", "message": str(e), "recovery": None}, indent=2))
        return 2

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
