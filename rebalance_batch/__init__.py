"""
rebalance_batch -- Planning, submission and recording of rebalance runs.

Turns an inventory snapshot into a MigrationPlan (weigh, distribute,
partition), submits each batch or single item as an isolated unit, and
records the outcome in the run ledger.  Platform access goes through the
collaborator protocols in ``rebalance_batch.collaborators``.

Architecture:
    rebalance_batch/ is a top-level package.  Nothing in kernel/,
    engines/ or config/ imports from rebalance_batch.

Invariants:
    - Configuration errors are raised before any intake change or job.
    - Every inventory item lands in exactly one assignment.
    - One failed unit never stops the remaining units.
    - Clock injection (no datetime.now() calls).
"""
