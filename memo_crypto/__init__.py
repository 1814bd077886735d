"""Symmetric layer of the memo scheme: nonces, key schedule, AES-256-CBC."""
