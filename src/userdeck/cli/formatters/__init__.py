"""Rich formatters for CLI output.

Provides the shared Console instance used by every CLI module.

Semantic Colors:
- green: success
- yellow: warning
- red: error
- blue: info
"""

from rich.console import Console
from rich.theme import Theme

USERDECK_THEME = Theme(
    {
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "info": "blue",
        "muted": "dim",
        "highlight": "bold cyan",
    }
)

console = Console(theme=USERDECK_THEME)

__all__ = ["console", "USERDECK_THEME"]
