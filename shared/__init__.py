"""
Shared Kernel

Base classes for entities, aggregates and domain events, the UTC day and
half-open DateRange primitives, and the unit of work / message bus pair
that publishes events after commit.
"""
