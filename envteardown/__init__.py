"""Environment-scoped EC2 teardown orchestrator."""

__version__ = "0.1.0"
