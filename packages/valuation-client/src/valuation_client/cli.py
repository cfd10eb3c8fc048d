"""
Command-line entry point.

    valuation-client report wizard.json --backend demo --output reports/
    valuation-client report wizard.json --stream
    valuation-client ping --backend http://127.0.0.1:8000
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from valuation_client.clients import AnalysisClient, CloudClient
from valuation_client.config import BackendPreferences, Settings, resolve_backend
from valuation_client.errors import ValuationClientError
from valuation_client.models.wizard import WizardData
from valuation_client.scoring import confidence_label, format_currency, score_confidence
from valuation_report import generate_valuation_pdf

logger = logging.getLogger(__name__)


def _pick_backend(args: argparse.Namespace, settings: Settings) -> str:
    if args.backend:
        return args.backend
    preferences = BackendPreferences.load(settings.preferences_path)
    url, label = resolve_backend(preferences, settings)
    print(f"Using {label} ({url})")
    return url


def _load_wizard(path: str) -> WizardData:
    try:
        return WizardData.model_validate(json.loads(Path(path).read_text(encoding="utf-8")))
    except (OSError, ValueError) as e:
        raise ValueError(f"Could not read wizard data from {path}: {e}") from e


def run_report(args: argparse.Namespace, settings: Settings) -> int:
    wizard = _load_wizard(args.wizard)
    confidence = score_confidence(wizard)
    print(f"\n--- Valuation report for {wizard.business_name or 'Startup'} ---")
    print(f"  Data confidence: {confidence}% ({confidence_label(confidence)})")

    print("\n[1/2] Generating valuation report...")
    with AnalysisClient(base_url=_pick_backend(args, settings), settings=settings) as client:
        if args.new_api:
            report = client.generate_valuation_report_new(wizard)
        elif args.stream:
            def show_progress(chunk):
                if chunk.get("status") == "starting":
                    print(f"  [stage {chunk.get('stage')}] {chunk.get('message')}")

            report = client.stream_valuation_report(wizard, show_progress)
        else:
            report = client.generate_valuation_report(wizard)

    final_range = report.final_valuation.final_range
    if final_range is not None:
        print(
            f"  Valuation range: {format_currency(final_range.lower * 1e6)}"
            f" - {format_currency(final_range.upper * 1e6)}"
        )

    print("\n[2/2] Rendering PDF...")
    path = generate_valuation_pdf(wizard, report, confidence, output=args.output)
    print(f"  Saved to {path}")
    return 0


def run_ping(args: argparse.Namespace, settings: Settings) -> int:
    if args.cloud:
        with CloudClient(base_url=args.backend, settings=settings) as client:
            ok = client.test_connection()
        target = client.base_url
    else:
        with AnalysisClient(base_url=_pick_backend(args, settings), settings=settings) as client:
            ok = client.test_connection()
        target = client.base_url

    print(f"{target}: {'reachable' if ok else 'unreachable'}")
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="valuation-client", description="Startup valuation client")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log HTTP traffic")
    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Generate a valuation report PDF from wizard data")
    report.add_argument("wizard", help="Path to a JSON file with the wizard answers (step1..step4)")
    report.add_argument("--backend", help="Backend URL, or 'demo' (default: saved preference)")
    mode = report.add_mutually_exclusive_group()
    mode.add_argument("--new-api", action="store_true", help="Use the external valuation API")
    mode.add_argument("--stream", action="store_true", help="Use the streaming endpoint")
    report.add_argument("--output", default=".", help="Directory for the PDF (default: current directory)")
    report.set_defaults(handler=run_report)

    ping = subparsers.add_parser("ping", help="Check that a backend is reachable")
    ping.add_argument("--backend", help="Backend URL, or 'demo'")
    ping.add_argument("--cloud", action="store_true", help="Check the cloud API instead")
    ping.set_defaults(handler=run_ping)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        settings = Settings.from_env()
        return args.handler(args, settings)
    except (ValuationClientError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
