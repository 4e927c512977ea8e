# src/wg_admin/__init__.py
