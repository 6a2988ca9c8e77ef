"""
halgraph.core: small shared helpers used across the configuration passes.

Modules:
  - span: source location of declarations
  - canonical_json: deterministic JSON rendering of graphs and reports
"""

__all__ = [
	"span",
	"canonical_json",
]
