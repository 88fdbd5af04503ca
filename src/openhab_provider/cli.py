"""
Command-line interface for the openHAB provider.

Acts as a small plugin host around ``ProviderHost``: reads a configuration
document (JSON or YAML), optionally reads and writes a state file, and prints
diagnostics and planned changes.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from openhab_provider import __version__
from openhab_provider.core.diagnostics import Diagnostics
from openhab_provider.core.exceptions import ConfigurationError, OpenhabProviderException
from openhab_provider.core.logger import configure_root_logger, get_logger
from openhab_provider.host import HostResult, ProviderHost
from openhab_provider.models.config_document import ConfigDocument
from openhab_provider.provider import OpenhabProvider

logger = get_logger(__name__)


def _load_mapping(path: str) -> Dict[str, Any]:
    config_file = Path(path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_file, "r") as f:
        if config_file.suffix == ".json":
            data = json.load(f)
        elif config_file.suffix in (".yaml", ".yml"):
            try:
                import yaml
            except ImportError:
                raise ImportError(
                    "PyYAML required for YAML configs. "
                    "Install with: pip install 'openhab-provider[yaml]'"
                )
            data = yaml.safe_load(f)
        else:
            raise ConfigurationError(
                f"Unsupported config format: {config_file.suffix}. "
                "Use .json or .yaml"
            )

    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")
    return data


def load_document(config_path: str) -> ConfigDocument:
    data = _load_mapping(config_path)
    try:
        return ConfigDocument.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration document {config_path}: {e}") from e


def load_state(state_path: Optional[str]) -> Optional[Dict[str, Any]]:
    if not state_path or not Path(state_path).exists():
        return None
    with open(state_path, "r") as f:
        return json.load(f)


def save_state(state_path: str, state: Dict[str, Any]) -> None:
    with open(state_path, "w") as f:
        json.dump(state, f, indent=2, sort_keys=True)
        f.write("\n")


def _report(diagnostics: Diagnostics) -> None:
    for d in diagnostics:
        print(str(d), file=sys.stderr)


def main(
    command: str,
    config_path: Optional[str] = None,
    *,
    config_dict: Optional[Dict[str, Any]] = None,
    state_path: Optional[str] = None,
    address: Optional[str] = None,
    import_id: Optional[str] = None,
) -> HostResult:
    """
    Run one host command against a configuration document.

    Args:
        command: One of validate, plan, apply, destroy, import
        config_path: Path to JSON/YAML configuration file
        config_dict: Configuration document given directly instead of a file
        state_path: Optional state file; read before and written after apply/destroy/import
        address: Resource address for import (``<type>.<name>``)
        import_id: openHAB identifier for import

    Returns:
        The HostResult with diagnostics, state and changes

    Example:
        >>> from openhab_provider.cli import main
        >>> result = main("validate", config_dict={"resources": [...]})
        >>> result.ok
        True
    """
    if config_dict is not None:
        document = ConfigDocument.model_validate(config_dict)
    elif config_path:
        document = load_document(config_path)
    else:
        raise ValueError("Either config_path or config_dict must be provided")

    host = ProviderHost(document, state=load_state(state_path), provider=OpenhabProvider(version=__version__))

    if command == "validate":
        result = host.validate()
    elif command == "plan":
        result = host.plan()
    elif command == "apply":
        result = host.apply()
    elif command == "destroy":
        result = host.destroy()
    elif command == "import":
        if not address or not import_id:
            raise ValueError("import requires an address and an import id")
        result = host.import_resource(address, import_id)
    else:
        raise ValueError(f"Unsupported command: {command!r}")

    if state_path and command in ("apply", "destroy", "import"):
        save_state(state_path, result.state)
        logger.info(f"State written to {state_path}")

    return result


def schema_document() -> Dict[str, Any]:
    provider = OpenhabProvider(version=__version__)
    return {
        "provider": provider.schema(),
        "resources": {name: cls.schema().to_dict() for name, cls in provider.resources().items()},
    }


def cli() -> None:
    """
    Command-line interface for the openHAB provider.

    Usage:
        openhab-provider validate config.yaml
        openhab-provider plan config.yaml --state state.json
        openhab-provider apply config.yaml --state state.json
        openhab-provider destroy config.yaml --state state.json
        openhab-provider import config.yaml openhab_item.kitchen KitchenLight --state state.json
        openhab-provider schema
    """
    parser = argparse.ArgumentParser(
        prog="openhab-provider",
        description="Manage openHAB items and links from a declarative configuration",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    for name, help_text in (
        ("validate", "Validate configuration without contacting openHAB"),
        ("plan", "Show the changes apply would make, based on the state file"),
        ("apply", "Create, update or replace resources to match the configuration"),
        ("destroy", "Delete every resource recorded in the state file"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("config", help="Path to configuration file (JSON or YAML)")
        sub.add_argument("--state", help="Path to the JSON state file")
        sub.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    import_parser = subparsers.add_parser("import", help="Adopt an existing openHAB item or link into state")
    import_parser.add_argument("config", help="Path to configuration file (JSON or YAML)")
    import_parser.add_argument("address", help="Resource address, e.g. openhab_item.kitchen_light")
    import_parser.add_argument("id", help="Import id: the item name, or <item_name>-<channel_uid> for links")
    import_parser.add_argument("--state", help="Path to the JSON state file")
    import_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers.add_parser("schema", help="Print provider and resource schemas as JSON")

    args = parser.parse_args()
    configure_root_logger("DEBUG" if getattr(args, "verbose", False) else "INFO")

    if args.command == "schema":
        print(json.dumps(schema_document(), indent=2))
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        result = main(
            args.command,
            args.config,
            state_path=args.state,
            address=getattr(args, "address", None),
            import_id=getattr(args, "id", None),
        )
    except (OpenhabProviderException, FileNotFoundError, ImportError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)

    _report(result.diagnostics)
    if args.command == "plan":
        for change in result.changes:
            print(f"{change.action:>8}  {change.address}")
    elif result.changes:
        print(json.dumps([change.__dict__ for change in result.changes], indent=2))

    sys.exit(0 if result.ok else 1)


if __name__ == "__main__":
    cli()
