import unittest
import io
import json
import os
import sys
import tempfile
from contextlib import redirect_stdout

import yaml

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from clientcheck.errors import ConfigFormatError
from clientcheck.models import RunReport, TestResult
from clientcheck.reporting import (
    ConsoleReporter,
    build_results_document,
    default_results_path,
    write_results,
)
from clientcheck.runlog import RunLog


def sample_report():
    report = RunReport(client="Acme", base_url="https://api.acme.test", started_at="2026-01-01T00:00:00+00:00")
    report.results = [
        TestResult("connectivity", True, ["HTTP 200"], 12.34),
        TestResult("test_data", False, ["id=2: HTTP 404", "id=3: HTTP 404"], 40.0),
    ]
    report.finished_at = "2026-01-01T00:00:01+00:00"
    return report


class TestResultsDocument(unittest.TestCase):
    def test_counts_and_failures(self):
        doc = build_results_document(sample_report())
        self.assertEqual((doc["passed"], doc["failed"], doc["total"]), (1, 1, 2))
        self.assertEqual(doc["failures"], ["test_data: id=2: HTTP 404; id=3: HTTP 404"])
        self.assertEqual(doc["results"][0]["elapsed_ms"], 12.3)
        self.assertNotIn("run", doc)

    def test_run_info_attached(self):
        doc = build_results_document(sample_report(), {"run_id": "abc", "final_hash": "f00"})
        self.assertEqual(doc["run"]["run_id"], "abc")

    def test_write_yaml_and_json(self):
        doc = build_results_document(sample_report())
        with tempfile.TemporaryDirectory() as d:
            y = write_results(doc, os.path.join(d, "out", "results.yaml"))
            j = write_results(doc, os.path.join(d, "results.json"))
            with open(y, encoding="utf-8") as f:
                self.assertEqual(yaml.safe_load(f), doc)
            with open(j, encoding="utf-8") as f:
                self.assertEqual(json.load(f), doc)

    def test_yaml_keeps_key_order(self):
        doc = build_results_document(sample_report())
        with tempfile.TemporaryDirectory() as d:
            path = write_results(doc, os.path.join(d, "results.yml"))
            with open(path, encoding="utf-8") as f:
                first = f.readline()
        self.assertTrue(first.startswith("client:"))

    def test_rejects_unknown_extension(self):
        with self.assertRaises(ConfigFormatError):
            write_results({}, "results.txt")

    def test_default_results_path(self):
        self.assertEqual(default_results_path(os.path.join("clients", "acme.json")),
                         os.path.join("clients", "acme_results.json"))
        self.assertEqual(default_results_path("acme.yaml", "out"), os.path.join("out", "acme_results.yaml"))


class TestConsoleReporter(unittest.TestCase):
    def test_summary(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            ConsoleReporter().print_summary(sample_report())
        out = buf.getvalue()
        self.assertIn("connectivity", out)
        self.assertIn("id=2: HTTP 404", out)
        self.assertIn("Passed: 1/2", out)
        self.assertIn("50.0%", out)


class TestRunLog(unittest.TestCase):
    def test_hash_chain(self):
        log = RunLog(run_id="fixed")
        h1 = log.log_event("RUN_START", {"client": "Acme"})
        h2 = log.log_event("TEST_RESULT", {"name": "connectivity"})
        self.assertNotEqual(h1, h2)
        self.assertEqual(log.events[1]["prev_hash"], h1)

        info = log.close()
        self.assertEqual(info["run_id"], "fixed")
        self.assertEqual(info["final_hash"], log.events[-1]["current_hash"])

    def test_writes_json_lines(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "run.log")
            log = RunLog(log_file=path)
            log.log_event("RUN_START", {})
            log.close()
            with open(path, encoding="utf-8") as f:
                lines = [json.loads(l) for l in f]
        self.assertEqual([l["type"] for l in lines], ["RUN_START", "RUN_COMPLETE"])


if __name__ == '__main__':
    unittest.main()
