"""Unit tests for individual saml_mdq modules.

Network access is replaced by in-memory transports or patched sessions.
"""
