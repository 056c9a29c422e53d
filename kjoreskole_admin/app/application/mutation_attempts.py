from __future__ import annotations


def begin_mutation(in_flight: set[str], operation: str) -> bool:
    if operation in in_flight:
        return False
    in_flight.add(operation)
    return True


def end_mutation(in_flight: set[str], operation: str) -> None:
    in_flight.discard(operation)
