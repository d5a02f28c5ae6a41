"""
Storage-backed building blocks shared by raffle contracts.

- `ownable` : single immutable owner recorded at deploy time
- `control` : pause switch and scoped reentrancy latch
"""
