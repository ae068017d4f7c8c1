"""
Test suite untuk Files-CRUD Auth.
"""
