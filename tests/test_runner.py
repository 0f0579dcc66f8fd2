from codemaster.runner import SimulatedRunner, summarize


def test_run_reports_every_test_case():
    result = SimulatedRunner().run(
        "print(sum(map(int, input().split())))",
        "python",
        stdin="1 2",
        test_cases=[{"input": "1 2", "expected": "3"}, "4 5"],
    )
    assert result["simulated"] is True
    assert result["output"]
    assert result["testResults"] == [
        {"input": "1 2", "expected": "3", "actual": None, "passed": False, "executionTimeMs": 0},
        {"input": "4 5", "expected": None, "actual": None, "passed": False, "executionTimeMs": 0},
    ]


def test_run_is_deterministic():
    runner = SimulatedRunner()
    cases = [{"input": "[1]", "expected": "1"}]
    assert runner.run("x", "go", test_cases=cases) == runner.run("x", "go", test_cases=cases)


def test_run_without_test_cases():
    result = SimulatedRunner().run("", "rust", test_cases={"not": "a list"})
    assert result["testResults"] == []
    assert summarize(result) == (False, 0)


def test_summarize():
    result = {
        "testResults": [
            {"passed": True, "executionTimeMs": 12},
            {"passed": True, "executionTimeMs": 30},
        ]
    }
    assert summarize(result) == (True, 42)
    result["testResults"][1]["passed"] = False
    assert summarize(result) == (False, 42)
