# File: src/alkeparking/infrastructure/__init__.py
