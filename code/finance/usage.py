from dataclasses import dataclass


@dataclass
class UsageStats:
    simulations: int = 0
    exports: int = 0

    def __post_init__(self):
        if self.simulations < 0 or self.exports < 0:
            raise ValueError("usage counters start at zero or above")

    def record_simulation(self) -> int:
        self.simulations += 1
        return self.simulations

    def record_export(self) -> int:
        self.exports += 1
        return self.exports

    @property
    def total_actions(self) -> int:
        return self.simulations + self.exports
