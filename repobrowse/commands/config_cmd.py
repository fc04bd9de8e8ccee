"""
ConfigCommand — Show and change configuration
"""

from ..commands.base import BaseCommand


class ConfigCommand(BaseCommand):
    """Command for configuration display and modification."""

    def show_config(self) -> int:
        """Display current configuration."""
        print(self.config_manager.display())
        return 0

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        """Set a configuration value."""
        error = self.config_manager.set(key, value, scope)

        if error:
            print(f"Error: {error}")
            return 1

        print(f"Set {key} = {value} ({scope})")
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='Show or set configuration')
    p.add_argument('--set', metavar='KEY=VALUE',
                   help='Set a value (e.g., finder.command=sk)')
    p.add_argument('--user', action='store_true',
                   help='Write to user config instead of project config')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    if args.set:
        if '=' not in args.set:
            print("Error: Use format KEY=VALUE (e.g., finder.command=sk)")
            return 1
        key, value = args.set.split('=', 1)
        scope = "user" if args.user else "project"
        return cli._config_cmd.set_config(key, value, scope)
    return cli._config_cmd.show_config()
