"""Core: tree model, structural operations and the rollback engine."""
