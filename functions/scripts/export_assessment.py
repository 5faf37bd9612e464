"""
Render a saved assessment JSON file to PDF, spreadsheet and/or email text.

Accepts either a bare AIAssessmentOutput document or a complete_assessment
response envelope ({"success": true, "data": {"assessment": ...}}).

Usage:
  python scripts/export_assessment.py --input assessment.json --client-name "Mary Johnson" \
      --format pdf --format xlsx --out-dir ./exports
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings  # noqa: E402
from models.assessment_input import SelfReportedInfo  # noqa: E402
from models.assessment_output import AIAssessmentOutput  # noqa: E402
from services.email_summary import build_email_summary, build_mailto_link  # noqa: E402
from services.excel_export import build_workbook_filename, export_workbook_bytes  # noqa: E402
from services.pdf_generator import ReportRequest, build_report_filename, generate_pdf_local  # noqa: E402
from utils.pipeline_logger import configure_logging  # noqa: E402

FORMATS = ("pdf", "xlsx", "email")


def _load_assessment(path: Path) -> AIAssessmentOutput:
    data: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data.get("data"), dict) and "assessment" in data["data"]:
        data = data["data"]["assessment"]
    return AIAssessmentOutput.model_validate(data)


def main() -> int:
    parser = argparse.ArgumentParser(description="Render a saved home safety assessment")
    parser.add_argument("--input", required=True, help="Path to the assessment JSON file")
    parser.add_argument("--client-name", required=False, help="Client name printed on the report")
    parser.add_argument("--client-address", required=False, help="Client address printed on the report")
    parser.add_argument("--assessor-name", required=False, help="Assessor name (defaults to AI-Assisted Assessment)")
    parser.add_argument("--case-number", required=False, help="Case / reference number")
    parser.add_argument("--program-type", default="OAHMP", help="OAHMP | CIL | AAA | CDBG | OTHER")
    parser.add_argument("--budget-cap", type=float, default=None, help="Program budget cap for the cost summary")
    parser.add_argument(
        "--format",
        action="append",
        choices=FORMATS,
        help="Output format; repeat for several (defaults to pdf)",
    )
    parser.add_argument("--out-dir", default=".", help="Directory for the generated files")
    parser.add_argument("--log-level", default=settings.log_level, help="Log level (default from LOG_LEVEL)")
    args = parser.parse_args()

    configure_logging(args.log_level)

    output = _load_assessment(Path(args.input))
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    today = date.today()
    client_info = SelfReportedInfo(name=args.client_name, address=args.client_address)

    for fmt in args.format or ["pdf"]:
        if fmt == "pdf":
            request = ReportRequest(program_type=args.program_type, budget_cap=args.budget_cap)
            if args.client_name:
                request.client_name = args.client_name
            if args.client_address:
                request.client_address = args.client_address
            if args.assessor_name:
                request.assessor_name = args.assessor_name
            request.case_number = args.case_number

            path = out_dir / build_report_filename(args.client_name, today)
            result = generate_pdf_local(output, str(path), request)
            print(f"PDF written: {result.output_path} ({result.page_count} pages)")

        elif fmt == "xlsx":
            path = out_dir / build_workbook_filename(args.client_name, today)
            path.write_bytes(export_workbook_bytes(output, client_info, today))
            print(f"Spreadsheet written: {path}")

        elif fmt == "email":
            summary = build_email_summary(output, client_info, today)
            path = out_dir / "email_summary.txt"
            path.write_text(f"Subject: {summary.subject}\n\n{summary.body}\n", encoding="utf-8")
            print(f"Email summary written: {path}")
            print(f"mailto link: {build_mailto_link(summary)[:120]}...")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
