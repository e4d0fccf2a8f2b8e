"""
store — Document store access.

Provides:
  • ``CouchClient`` — thin async HTTP client for a CouchDB-style API
  • ``CredentialStore`` — identity lookups / creation in the auth collection
  • ``TaskStore`` — per-user task collections with revision-tag pass-through
"""
