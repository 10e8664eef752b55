"""Spec-suite harness - runs Mustache spec files through the native backend.

A suite file (JSON or YAML) holds ``overview`` and a list of ``tests``, each
with ``name``, ``desc``, ``data``, ``template``, ``expected`` and optional
``partials``. Every case is compiled, rendered and compared to its
expectation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import msgspec

from mustc import api
from mustc.config import CompileOptions, WhitespaceMode
from mustc.exceptions import MustcError, TemplateSyntaxError
from mustc.loader import load

log = logging.getLogger(__name__)

SUITE_SUFFIXES = (".json", ".yml", ".yaml")
UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9 _.-]+")


class SpecCase(msgspec.Struct):
    """A single spec test case."""

    name: str
    template: str
    expected: str
    data: Any = None
    desc: str = ""
    partials: Dict[str, str] = {}


class SpecSuite(msgspec.Struct):
    """A spec file: an overview plus its test cases."""

    tests: List[SpecCase]
    overview: str = ""


@dataclass
class CaseResult:
    passed: bool
    output: str = ""
    code: str = ""
    error: Optional[str] = None


@dataclass
class SuiteReport:
    total: int = 0
    passed: int = 0
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.passed == self.total


def decode_suite(text: str, suffix: str) -> SpecSuite:
    """Decode suite text by file suffix (.json, .yml or .yaml)."""
    if suffix == ".json":
        return msgspec.json.decode(text, type=SpecSuite)
    return msgspec.yaml.decode(text, type=SpecSuite)


def load_suites(directory: Path) -> Dict[str, SpecCase]:
    """Load every suite file in directory.

    Returns:
        Ordered mapping of "<file stem>-<case name>" to case.
    """
    cases: Dict[str, SpecCase] = {}
    for path in sorted(directory.iterdir()):
        if path.suffix not in SUITE_SUFFIXES or not path.is_file():
            continue
        try:
            suite = decode_suite(path.read_text(encoding="utf-8"), path.suffix)
        except msgspec.DecodeError as exc:
            raise MustcError(f"Invalid spec suite {path}: {exc}") from exc
        for case in suite.tests:
            cases[f"{path.stem}-{case.name}"] = case
    return cases


def run_case(case: SpecCase, options: Optional[CompileOptions] = None) -> CaseResult:
    """Compile and render one case. Syntax errors fail the case."""
    options = options or CompileOptions(whitespace_mode=WhitespaceMode.STANDALONE)
    try:
        tree = api.compile(case.template, case.partials, options)
    except TemplateSyntaxError as exc:
        return CaseResult(passed=False, error=f"[PARSER EXCEPTION] {exc}")

    code = api.generate(tree, "native")
    output = load(code)(case.data)
    return CaseResult(passed=output == case.expected, output=output, code=code)


def format_failure(case: SpecCase, result: CaseResult) -> str:
    """Human-readable failure report for one case."""
    lines = [f'Running test "{case.name}" ({case.desc})...', ""]
    if result.error is not None:
        lines.append(result.error)
    else:
        lines += [
            "TEST NOT PASSED:",
            ">output>",
            result.output,
            "<<>expected>",
            case.expected,
            "<<",
            "",
            "GENERATED CODE:",
            "",
            result.code,
        ]
    lines += [
        "",
        "TEMPLATE:",
        "",
        case.template,
        "",
        "DATA:",
        "",
        msgspec.json.encode(case.data).decode(),
        "",
    ]
    return "\n".join(lines)


def run_suites(
    directory: Path,
    fail_output_dir: Optional[Path] = None,
    options: Optional[CompileOptions] = None,
) -> SuiteReport:
    """Run every case of every suite in directory.

    With fail_output_dir, each failing case writes a report named after its id.
    """
    report = SuiteReport()
    cases = load_suites(directory)
    log.info("Running %d spec cases from %s", len(cases), directory)

    for case_id, case in cases.items():
        report.total += 1
        result = run_case(case, options)

        if result.passed:
            report.passed += 1
            log.debug("[PASS] %s", case_id)
            continue

        report.failures.append(case_id)
        log.debug("[FAIL] %s", case_id)
        if fail_output_dir is not None and fail_output_dir.is_dir():
            filename = UNSAFE_FILENAME_CHARS.sub("", case_id) + ".txt"
            (fail_output_dir / filename).write_text(format_failure(case, result))

    return report
