"""
Infrastructure layer - Adapters for external systems.

This layer contains:
- PostgreSQL persistence adapters
- In-memory stubs for development and testing
- Observability (structured logging, correlation ids)

IMPORT RULES:
- CAN import from: domain, application (ports)
- CANNOT import from: bootstrap
"""
