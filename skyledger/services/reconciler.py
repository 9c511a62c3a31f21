"""
Investment ledger reconciliation.

Compares the current snapshot against the last persisted one and keeps a
running "net invested quantity" per item:

- Acquisitions add the increase to the ledger.
- Depletions reduce the ledger, floored at zero. Anything lost beyond the
  invested amount is absorbed silently.
- Items gone from the snapshot are pruned from the ledger.

Items still held with a balance driven to exactly zero keep their entry.
"""

from collections.abc import Mapping

from skyledger.models.inventory import (
    InvestmentLedger,
    ItemChange,
    ItemSnapshot,
    ReconciliationResult,
)


def diff_snapshots(current: ItemSnapshot, previous: Mapping[str, int]) -> list[ItemChange]:
    """List items whose quantity moved, in the current snapshot's order."""
    changes: list[ItemChange] = []
    for name, count in current.items():
        prev_count = previous.get(name, 0)
        if count != prev_count:
            changes.append(ItemChange(name=name, previous=prev_count, current=count))
    return changes


def reconcile(
    current: ItemSnapshot,
    previous: Mapping[str, int],
    ledger: Mapping[str, int],
) -> ReconciliationResult:
    """
    Reconcile a new snapshot against the previous snapshot and ledger.

    Inputs are not mutated.

    Args:
        current: Freshly extracted snapshot
        previous: Last persisted snapshot
        ledger: Last persisted investment ledger

    Returns:
        ReconciliationResult with the updated ledger, the change set and
        whether the ledger was mutated
    """
    new_ledger: InvestmentLedger = dict(ledger)
    dirty = False

    for name, count in current.items():
        diff = count - previous.get(name, 0)

        if diff > 0:
            new_ledger[name] = new_ledger.get(name, 0) + diff
            dirty = True
        elif diff < 0:
            invested = new_ledger.get(name, 0)
            sold = min(-diff, invested)
            if sold > 0:
                new_ledger[name] = invested - sold
                dirty = True

    # Prune items no longer held, including zero balances
    for name in list(new_ledger):
        if name not in current:
            del new_ledger[name]
            dirty = True

    return ReconciliationResult(
        ledger=new_ledger,
        changes=diff_snapshots(current, previous),
        dirty=dirty,
    )
