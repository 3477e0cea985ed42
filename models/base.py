# models/base.py
"""
Base model for all database tables.
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _get_current_time():
    """Lazy import to avoid circular dependency."""
    from mlm_system.utils.time_machine import timeMachine
    return timeMachine.now
