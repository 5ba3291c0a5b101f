"""Entry point for the AGENTS.md provisioner.

Executing ``python -m backend_ai_rules`` forwards to the CLI defined in
``backend_ai_rules.cli``.
"""
from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
