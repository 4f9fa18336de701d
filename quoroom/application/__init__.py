"""
Application layer - Use cases and orchestration for Quoroom.

This layer contains:
- Application services (proposal admission, vote ledger, objection window,
  voter health, expiry sweep, engine facade)
- Port definitions (abstract interfaces for infrastructure)

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, bootstrap
"""
