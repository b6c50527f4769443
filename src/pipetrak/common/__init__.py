"""Cross-cutting helpers shared by adapters and entry points."""
