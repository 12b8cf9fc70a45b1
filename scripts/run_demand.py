import argparse
import asyncio
import json
import os
import re
from datetime import date

from openpyxl import load_workbook

from core.error_handling import AppError, handle_error
from core.models import CaseData
from logger import log_error_with_metrics, logger
from services.demand_service import assemble_demand


def _slug(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", value.strip()).strip("_") or "Unnamed"


def read_case_rows(excel_path: str) -> list:
    """
    One dict per worksheet row, keyed by the header row. Blank rows are skipped.
    """
    wb = load_workbook(excel_path, data_only=True)
    sheet = wb.active
    headers = [str(cell.value).strip() if cell.value is not None else "" for cell in sheet[1]]

    rows = []
    for row in sheet.iter_rows(min_row=2, values_only=True):
        if all(value in (None, "") for value in row):
            continue
        rows.append({h: v for h, v in zip(headers, row) if h})
    return rows


def write_demand(demand, case: CaseData, output_dir: str, today: date = None) -> str:
    today = today or date.today()
    base = f"Demand_{_slug(case.plaintiff_name)}_{today.isoformat()}"
    text_path = os.path.join(output_dir, f"{base}.md")
    with open(text_path, "w", encoding="utf-8") as f:
        f.write(demand.full_text)

    with open(os.path.join(output_dir, f"{base}.json"), "w", encoding="utf-8") as f:
        json.dump(demand.to_dict(), f, indent=2, default=str)
    return text_path


async def generate_all_demands(excel_path: str, output_dir: str, **assemble_kwargs) -> list:
    os.makedirs(output_dir, exist_ok=True)
    output_paths = []

    for index, row in enumerate(read_case_rows(excel_path), start=2):
        try:
            case = CaseData.from_dict(row)
        except AppError as e:
            handle_error(e, "RUN_DEMAND_001", context={"row": index})
            continue
        if not case.plaintiff_name:
            logger.warning(f"[RUN_DEMAND] Row {index} has no plaintiff name; skipping")
            continue

        try:
            demand = await assemble_demand(case, **assemble_kwargs)
        except AppError as e:
            log_error_with_metrics(e, e.code, {"row": index, "case_id": case.case_id})
            logger.warning(f"[RUN_DEMAND] Row {index} could not be assembled; skipping")
            continue

        path = write_demand(demand, case, output_dir, assemble_kwargs.get("today"))
        if demand.validation is not None and not demand.validation.ok:
            logger.warning(f"[RUN_DEMAND] ⚠️ {path} is incomplete: missing {demand.validation.missing}")
        logger.info(f"[RUN_DEMAND] Generated: {path}")
        output_paths.append(path)

    return output_paths


# === Main Execution ===
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Assemble demand letters from an Excel intake sheet.")
    parser.add_argument("excel_path", nargs="?", default="data_demand_requests.xlsx")
    parser.add_argument("output_dir", nargs="?", default="output_demands")
    args = parser.parse_args()

    asyncio.run(generate_all_demands(args.excel_path, args.output_dir))
