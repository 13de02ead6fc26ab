"""
Sales daily report: session and authentication core.

- auth: password hashing/policy, login rate limiting, cookie sessions, guards
- core: configuration and startup validation
- services: sales master record store
"""

__version__ = "1.0.0"
