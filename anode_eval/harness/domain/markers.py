"""Markers that fence the harness output inside a sandbox log."""

TEST_OUTPUT_START = "TEST_OUTPUT_START"
TEST_OUTPUT_END = "TEST_OUTPUT_END"


def extract_test_output(logs: str) -> str | None:
    """Return the text between the first start marker and the next end marker."""
    start = logs.find(TEST_OUTPUT_START)
    if start == -1:
        return None
    after_start = logs[start + len(TEST_OUTPUT_START) :]
    end = after_start.find(TEST_OUTPUT_END)
    if end == -1:
        return None
    return after_start[:end].strip()
