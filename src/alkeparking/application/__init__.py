# File: src/alkeparking/application/__init__.py
