"""Arena: matches between players and the results report."""

from .match import MatchResult, play_match, X_WINS, O_WINS, DRAWN
from .report import (
    RESULT_FIELDS,
    ResultMatrix,
    append_result,
    load_results,
    summarize_results,
    print_report,
)

__all__ = [
    "MatchResult",
    "play_match",
    "X_WINS",
    "O_WINS",
    "DRAWN",
    "RESULT_FIELDS",
    "ResultMatrix",
    "append_result",
    "load_results",
    "summarize_results",
    "print_report",
]
