"""Dependency versions: registry lookups and Cargo.toml updates.

The versions package provides:
- Semantic version parsing and precedence
- A crates.io client returning published versions
- Stable-first version selection with caller-side fallbacks
- In-place rewriting of dependency declarations
"""
