"""Backend AI rules package.

This package ships Markdown guidelines for AI coding agents (OpenAPI
documentation, repository/service/controller patterns, unit testing and
commit messages) together with a small provisioner that copies the
``AGENTS.md`` entry point into the root of a consuming project.
"""

__all__ = ["cli", "provisioner"]
__version__ = "0.3.0"
