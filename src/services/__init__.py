"""
Role-gated action layer.

Each action checks the caller's role, runs its data access through the
SafeExecutor, invalidates cached view paths after successful writes, and
reports the outcome as an ActionResult (never raises for expected
failures).
"""
