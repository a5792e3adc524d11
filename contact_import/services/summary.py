from __future__ import annotations

from ..models.import_result import ImportResult

"""SUMMARY line rendering for a commit run.

Format:
SUMMARY submitted={n} imported={i} skipped={s} errors={e} elapsed_sec={t}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


SUMMARY_LABEL = "SUMMARY"


def render_summary_body(result: ImportResult) -> str:
    """Key/value part of the SUMMARY line (the label is added by the log formatter)."""
    return (
        f"submitted={result.submitted} "
        f"imported={result.imported} "
        f"skipped={result.skipped} "
        f"errors={len(result.failures)} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line for ``result``.

    Examples:
        >>> render_summary_line(ImportResult(imported=2, skipped=1, elapsed_seconds=1.5))
        'SUMMARY submitted=3 imported=2 skipped=1 errors=0 elapsed_sec=1.5'
    """
    return f"{SUMMARY_LABEL} {render_summary_body(result)}"
