r"""Arithmetic helpers for progress reporting."""

from __future__ import annotations

__all__ = ["calculate_percentage"]


def calculate_percentage(value: float, total_value: float) -> float:
    """Calculate what percentage ``value`` is of ``total_value``.

    Args:
        value: The amount transferred so far.
        total_value: The total amount. A total of 0 is treated as unknown.

    Returns:
        The percentage in the range [0, 100] for 0 <= value <= total_value,
        or 0 when the total is 0.

    Example:
        ```pycon
        >>> from webrequest.utils.math import calculate_percentage
        >>> calculate_percentage(25, 200)
        12.5
        >>> calculate_percentage(10, 0)
        0.0

        ```
    """
    if not total_value:
        return 0.0
    return (value / total_value) * 100.0
