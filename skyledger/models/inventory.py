from dataclasses import dataclass, field
from enum import Enum

# Item display name -> quantity held
ItemSnapshot = dict[str, int]

# Item display name -> quantity acquired and not yet depleted
InvestmentLedger = dict[str, int]


class MergePolicy(str, Enum):
    """How quantities for the same name in different containers combine."""

    OVERWRITE = "overwrite"
    SUM = "sum"


@dataclass
class ContainerItems:
    """
    Per-container item counts extracted from one profile.

    Kept separate so the cross-container merge policy is explicit.
    """

    inventory: ItemSnapshot = field(default_factory=dict)
    enderchest: ItemSnapshot = field(default_factory=dict)
    storage: ItemSnapshot = field(default_factory=dict)

    def merge(self, policy: MergePolicy = MergePolicy.OVERWRITE) -> ItemSnapshot:
        """
        Flatten the three containers into one snapshot.

        Containers merge in order inventory, ender chest, storage. Under
        OVERWRITE a later container replaces an earlier count for the same
        name, under SUM the counts are added.
        """
        merged: ItemSnapshot = {}
        for source in (self.inventory, self.enderchest, self.storage):
            for name, count in source.items():
                if policy is MergePolicy.SUM:
                    merged[name] = merged.get(name, 0) + count
                else:
                    merged[name] = count
        return merged

    def total_items(self) -> int:
        """Total quantity across all containers, without merging."""
        return sum(
            sum(source.values()) for source in (self.inventory, self.enderchest, self.storage)
        )


@dataclass(frozen=True)
class ItemChange:
    """A quantity change for one item between two snapshots."""

    name: str
    previous: int
    current: int

    @property
    def delta(self) -> int:
        return self.current - self.previous


@dataclass
class ReconciliationResult:
    """Outcome of reconciling a new snapshot against persisted state."""

    ledger: InvestmentLedger
    changes: list[ItemChange] = field(default_factory=list)
    dirty: bool = False

    def total_invested(self) -> int:
        return sum(self.ledger.values())
