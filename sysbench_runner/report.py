import csv
import logging
from pathlib import Path
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font

from sysbench_runner.sysbench import FileioMetrics

logger = logging.getLogger("SYSBENCH")

COLUMNS = list(FileioMetrics().as_dict().keys())


def measured(results) -> List:
    """Run-phase results that produced metrics."""
    return [result for result in results if result.phase == "run" and result.metrics is not None]


def write_csv(results, csv_path) -> Path:
    csv_path = Path(csv_path)
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["mode", "metric", "value"])
        for result in measured(results):
            for metric, value in result.metrics.as_dict().items():
                writer.writerow([result.mode, metric, value])
    logger.info(f"CSV report saved to {csv_path}")
    return csv_path


def write_xlsx(results, xlsx_path) -> Path:
    xlsx_path = Path(xlsx_path)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "fileio"
    sheet.append(["mode", "elapsed_s"] + COLUMNS)
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for result in measured(results):
        values = result.metrics.as_dict()
        sheet.append([result.mode, round(result.elapsed, 2)] + [values[column] for column in COLUMNS])
    workbook.save(xlsx_path)
    logger.info(f"Excel report saved to {xlsx_path}")
    return xlsx_path
