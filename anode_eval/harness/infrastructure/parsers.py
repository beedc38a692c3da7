"""Text parsers turning harness output into (passed, total) counts.

Per-test formats also yield the names of failed tests; summary-only formats
leave them empty.

Each parser returns None when it finds nothing it recognises, which the
adapter reports as an `error` classification.
"""

import json
import re

from anode_eval.harness.domain.adapter import HarnessCounts

_CARGO_PLAIN = re.compile(r"^test (\S+) \.\.\. (ok|FAILED|ignored)")
_CARGO_SUMMARY = re.compile(
    r"^test result: \w+\. (\d+) passed; (\d+) failed(?:; (\d+) ignored)?"
)
_PYTEST_SUMMARY = re.compile(r"(\d+) (passed|failed|error|errors|skipped)\b")
_GENERIC_PASSED = re.compile(r"(\d+)\s+(?:passed|passing)\b", re.IGNORECASE)
_GENERIC_FAILED = re.compile(r"(\d+)\s+(?:failed|failing)\b", re.IGNORECASE)
_GENERIC_TOTAL = re.compile(r"(\d+)\s+total\b", re.IGNORECASE)
_GENERIC_TESTS_LINE = re.compile(r"^\s*Tests?\b(?! Suites)", re.IGNORECASE)


def parse_cargo(output: str) -> HarnessCounts | None:
    """Parse libtest JSON events, then plain `test x ... ok` lines, then summaries."""
    passed = total = 0
    failed: list[str] = []
    for line in output.splitlines():
        try:
            event = json.loads(line)
        except ValueError:
            continue
        if not isinstance(event, dict) or event.get("type") != "test":
            continue
        if event.get("event") in ("ok", "failed") and "name" in event:
            total += 1
            if event["event"] == "ok":
                passed += 1
            else:
                failed.append(event["name"])
    if total:
        return HarnessCounts(passed=passed, total=total, failed=tuple(failed))

    for line in output.splitlines():
        match = _CARGO_PLAIN.match(line.strip())
        if match and match.group(2) != "ignored":
            total += 1
            if match.group(2) == "ok":
                passed += 1
            else:
                failed.append(match.group(1))
    if total:
        return HarnessCounts(passed=passed, total=total, failed=tuple(failed))

    found = False
    for line in output.splitlines():
        match = _CARGO_SUMMARY.match(line.strip())
        if match:
            found = True
            passed += int(match.group(1))
            total += int(match.group(1)) + int(match.group(2))
    return HarnessCounts(passed=passed, total=total) if found else None


def parse_pytest(output: str) -> HarnessCounts | None:
    """Count verbose per-test status lines, falling back to the summary line."""
    passed = total = 0
    failed: list[str] = []
    for line in output.splitlines():
        if "::" not in line:
            continue
        if " PASSED" in line:
            passed += 1
            total += 1
        elif " FAILED" in line or " ERROR" in line:
            total += 1
            failed.append(line.split()[0])
        elif " SKIPPED" in line:
            total += 1
    if total:
        return HarnessCounts(passed=passed, total=total, failed=tuple(failed))

    for line in reversed(output.splitlines()):
        counts = dict.fromkeys(("passed", "failed", "error", "skipped"), 0)
        matches = _PYTEST_SUMMARY.findall(line)
        if not matches:
            continue
        for number, label in matches:
            counts["error" if label == "errors" else label] += int(number)
        return HarnessCounts(passed=counts["passed"], total=sum(counts.values()))
    return None


def parse_go(output: str) -> HarnessCounts | None:
    passed = total = 0
    failed: list[str] = []
    for line in output.splitlines():
        stripped = line.strip()
        if stripped.startswith("--- PASS:"):
            passed += 1
            total += 1
        elif stripped.startswith("--- FAIL:"):
            total += 1
            failed.extend(stripped.removeprefix("--- FAIL:").split()[:1])
    if not total:
        return None
    return HarnessCounts(passed=passed, total=total, failed=tuple(failed))


def parse_generic(output: str) -> HarnessCounts | None:
    """Recognise `N passed, M failed, T total` summaries and mocha's `passing/failing`.

    Lines starting with `Tests` win over suite-level summaries such as jest's
    `Test Suites:` line.
    """
    lines = output.splitlines()
    preferred = [line for line in lines if _GENERIC_TESTS_LINE.match(line)]
    return _scan_counts(preferred) or _scan_counts(lines)


def _first_int(pattern: re.Pattern[str], lines: list[str]) -> int | None:
    for line in lines:
        match = pattern.search(line)
        if match:
            return int(match.group(1))
    return None


def _scan_counts(lines: list[str]) -> HarnessCounts | None:
    passed = _first_int(_GENERIC_PASSED, lines)
    failed = _first_int(_GENERIC_FAILED, lines)
    if passed is None and failed is None:
        return None
    passed = passed or 0
    total = _first_int(_GENERIC_TOTAL, lines)
    if total is None or total < passed:
        total = passed + (failed or 0)
    return HarnessCounts(passed=passed, total=total)
