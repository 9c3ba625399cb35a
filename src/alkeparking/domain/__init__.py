# File: src/alkeparking/domain/__init__.py
