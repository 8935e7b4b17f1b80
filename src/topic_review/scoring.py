"""Score aggregation for quiz submissions and review rounds."""


def _is_correct(result) -> bool:
    if isinstance(result, dict):
        return bool(result.get("is_correct"))
    return bool(getattr(result, "is_correct", False))


def score(results) -> dict:
    """Reduce per-question results into correct/total/percentage.

    Accepts dicts or objects exposing ``is_correct``. Percentage is rounded to a
    whole number and is 0 for an empty submission.
    """
    results = list(results)
    total = len(results)
    correct = sum(1 for r in results if _is_correct(r))
    # Halves round up (12.5 -> 13), not to even.
    percentage = 0 if total == 0 else int(correct / total * 100 + 0.5)
    return {"correct": correct, "total": total, "percentage": percentage}
