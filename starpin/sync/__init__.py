"""Program ID synchronization between generated project files.

This package provides the primitives for:
- Declaration sites: reading and rewriting one ``key = "value"`` line in lib.rs or Starpin.toml
- Keys: generating program keypairs and the program IDs derived from them
- Reconciliation: deciding which file wins, writing it back, and verifying the result
"""
