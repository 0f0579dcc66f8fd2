"""Code execution contract for the practice and editor views.

There is no sandboxed interpreter behind this yet. ``SimulatedRunner`` fills
the ``run`` contract without executing anything, so callers get a stable
result shape and can tell from ``simulated`` that nothing ran.
"""


def _test_cases(test_cases):
    if not isinstance(test_cases, list):
        return []
    return [case if isinstance(case, dict) else {"input": case} for case in test_cases]


class SimulatedRunner:
    output = "Code execution is simulated; no program was run."

    def run(self, code, language, stdin="", test_cases=None):
        results = [
            {
                "input": case.get("input"),
                "expected": case.get("expected"),
                "actual": None,
                "passed": False,
                "executionTimeMs": 0,
            }
            for case in _test_cases(test_cases)
        ]
        return {"output": self.output, "testResults": results, "simulated": True}


def summarize(result):
    """Return (all_passed, total_ms) for a run result; a run with no test cases never passes."""
    tests = result["testResults"]
    passed = bool(tests) and all(t["passed"] for t in tests)
    return passed, sum(t["executionTimeMs"] for t in tests)
