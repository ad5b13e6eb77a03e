"""
Rollback engine.

Example:
    from treedecision.core.rollback import RollbackOptions, rollback

    result = rollback(tree, RollbackOptions(tolerance=1e-9))
    result.expected_values[tree.root_id]
"""

from treedecision.core.rollback.engine import RollbackOptions, RollbackResult, rollback

__all__ = ["RollbackOptions", "RollbackResult", "rollback"]
