"""
Gaussian elimination over GF(2) for stalled peeling decodes.

Rows are int bitmasks (bit ``i`` set when slice ``i`` participates) and each
right-hand side is the whole block payload as an int, so one elimination
solves every bit plane at once.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


def rank_gf2(rows: Sequence[int]) -> int:
    """Rank of a set of bitmask rows."""
    basis: dict[int, int] = {}
    for row in rows:
        while row:
            lead = row.bit_length() - 1
            if lead not in basis:
                basis[lead] = row
                break
            row ^= basis[lead]
    return len(basis)


def solve_gf2(rows: Sequence[int], rhs: Sequence[int], m: int) -> Optional[List[int]]:
    """
    Solve ``rows . x = rhs`` for ``m`` unknowns.

    Returns ``None`` when the system is inconsistent or has fewer than ``m``
    independent rows.
    """
    A = list(rows)
    b = list(rhs)
    n = len(A)

    row = 0
    pivots: List[int] = []
    for col in range(m):
        bit = 1 << col
        pivot = None
        for r in range(row, n):
            if A[r] & bit:
                pivot = r
                break
        if pivot is None:
            continue

        A[row], A[pivot] = A[pivot], A[row]
        b[row], b[pivot] = b[pivot], b[row]

        # Full reduction, so no back-substitution pass is needed.
        for r in range(n):
            if r != row and A[r] & bit:
                A[r] ^= A[row]
                b[r] ^= b[row]
        pivots.append(col)
        row += 1

    # A zero row with a non-zero right-hand side means no solution.
    for i in range(row, n):
        if b[i]:
            return None

    if row < m:
        return None

    x = [0] * m
    for i, col in enumerate(pivots):
        x[col] = b[i]
    return x


__all__ = ["rank_gf2", "solve_gf2"]
