"""
Lightning test suites package.

Kept importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - CI/CD module imports
"""
