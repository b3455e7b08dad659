"""Rich/JSON output helpers.

The CLI renders ResultEnvelope for humans (Rich tables and fields) or
machines (``--json``: the camelCase wire form).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from kblog.output.renderers import render_result

if TYPE_CHECKING:
    from kblog.services.result import ResultEnvelope


def format_result(
    result: ResultEnvelope,
    *,
    op: str,
    json_output: bool = False,
    verbose: bool = False,
) -> str:
    """Format an envelope for display.

    Args:
        result: The envelope to format.
        op: Short label for the operation (``"find posts"``).
        json_output: If True, return JSON; otherwise return human-readable text.
        verbose: Include timestamps in tables.
    """
    if json_output:
        return json.dumps(result.to_wire(), indent=2, ensure_ascii=False)
    return render_result(result, op=op, verbose=verbose)
