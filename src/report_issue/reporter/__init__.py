"""Issue reporting components.

- Settings loaded from the environment / .env
- Structured logging
- Git credential lookup
- A small GitHub REST client and the issue operations built on it
"""
