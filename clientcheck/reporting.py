import os
import logging
from typing import Any, Dict, Optional

from colorama import Fore, Style

from .config import detect_format, dump_document
from .models import RunReport

logger = logging.getLogger("clientcheck.reporting")


class ConsoleReporter:
    def print_summary(self, report: RunReport):
        print(f"\n{Style.BRIGHT}=== API TEST REPORT: {report.client} ==={Style.RESET_ALL}\n")

        for res in report.results:
            p_str = f"{Fore.GREEN}PASS{Style.RESET_ALL}" if res.passed else f"{Fore.RED}FAIL{Style.RESET_ALL}"
            print(f"[{p_str}] {res.name} ({res.elapsed_ms:.0f}ms)")
            if not res.passed:
                for d in res.details:
                    print(f"      {Fore.YELLOW}- {d}{Style.RESET_ALL}")

        total = report.total
        score = (report.passed / total * 100) if total > 0 else 0.0
        print(f"\n{Style.BRIGHT}Pass Rate: {score:.1f}%{Style.RESET_ALL}")
        print(f"Passed: {report.passed}/{total}")


def build_results_document(report: RunReport, run_info: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    document = {
        "client": report.client,
        "base_url": report.base_url,
        "started_at": report.started_at,
        "finished_at": report.finished_at,
        "passed": report.passed,
        "failed": report.failed,
        "total": report.total,
        "failures": report.failures(),
        "results": [r.to_dict() for r in report.results],
    }
    if run_info:
        document["run"] = dict(run_info)
    return document


def write_results(document: Dict[str, Any], output_path: str) -> str:
    """Serializes a results document as YAML or JSON, chosen by extension."""
    fmt = detect_format(output_path)
    parent = os.path.dirname(output_path)
    if parent and not os.path.exists(parent):
        os.makedirs(parent)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(dump_document(document, fmt))
    logger.info("Results written to %s", output_path)
    return output_path


def default_results_path(config_path: str, results_dir: Optional[str] = None) -> str:
    """`clients/acme.yaml` -> `clients/acme_results.yaml` (same extension as the config)."""
    stem, ext = os.path.splitext(os.path.basename(config_path))
    folder = results_dir or os.path.dirname(config_path)
    return os.path.join(folder, f"{stem}_results{ext.lower() or '.yaml'}")
