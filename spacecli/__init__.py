"""Local tooling for Space projects: micro detection, icons, metadata, packaging, dev proxy and prompts."""

__version__ = "0.1.0"