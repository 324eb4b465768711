"""Genealogy graph traversal over LOT numbers.

Edges are lot-number strings resolved through a lookup callable, so a
dangling edge (a parent number that was never registered) is skipped.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable

from foodflow.modules.traceability.domain.aggregates.lot import LOT

Resolver = Callable[[str], "LOT | None"]
EdgeSelector = Callable[[LOT], Iterable[str]]


def children(lot: LOT) -> list[str]:
    return lot.child_lots


def parents(lot: LOT) -> list[str]:
    return lot.parent_lots


def traverse(start: LOT, edges: EdgeSelector, resolve: Resolver) -> list[LOT]:
    """Depth-first pre-order walk from ``start``, start included and first.

    A visited set keyed by lot number guarantees termination and drops
    duplicates reached through diamonds or cycles. Iterative, so long
    genealogy chains do not hit the recursion limit.
    """
    result: list[LOT] = [start]
    visited: set[str] = {start.lot_number}
    # one edge iterator per LOT on the current path
    stack = [iter(list(edges(start)))]
    while stack:
        for lot_number in stack[-1]:
            if lot_number in visited:
                continue
            visited.add(lot_number)
            nxt = resolve(lot_number)
            if nxt is not None:
                result.append(nxt)
                stack.append(iter(list(edges(nxt))))
                break
        else:
            stack.pop()
    return result


def find_cycles(lots: Iterable[LOT], resolve: Resolver) -> list[list[str]]:
    """Return every cycle along ``child_lots`` edges as a list of lot numbers.

    Each cycle is reported once per back edge, starting at the LOT the walk
    re-entered.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    colour: dict[str, int] = {}
    cycles: list[list[str]] = []

    def visit(lot: LOT, path: list[str]) -> None:
        colour[lot.lot_number] = GREY
        path.append(lot.lot_number)
        for child_number in lot.child_lots:
            state = colour.get(child_number, WHITE)
            if state == GREY:
                cycles.append(path[path.index(child_number):])
            elif state == WHITE:
                child = resolve(child_number)
                if child is not None:
                    visit(child, path)
        path.pop()
        colour[lot.lot_number] = BLACK

    for lot in lots:
        if colour.get(lot.lot_number, WHITE) == WHITE:
            visit(lot, [])
    return cycles
