# src/maa_installer/__init__.py
