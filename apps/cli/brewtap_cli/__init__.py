"""brewtap CLI Application.

Command-line interface for publishing Homebrew formula bumps from CI.

Execution Context:
    CLI application - invoked from terminal

Dependencies:
    - click: CLI framework
    - rich: Terminal formatting
    - brewtap_core: Core library

Metadata:
    Version: 0.1.0
    Author: brewtap Team
"""
from __future__ import annotations

__version__ = "0.1.0"
