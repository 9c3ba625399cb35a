# File: tests/integration/__init__.py
