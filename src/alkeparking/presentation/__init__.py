# File: src/alkeparking/presentation/__init__.py
