"""
Schema migration entry point for PackWorkX deployments.

The CRM ships without an alembic.ini; the Alembic config is assembled here from
DATABASE_URL so the same command works in containers and on developer machines.

    python -m packworkx.db.run_migrations upgrade head
    python -m packworkx.db.run_migrations stamp head     # database built by create_schema
    python -m packworkx.db.run_migrations downgrade -1
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from alembic import command
from alembic.config import Config

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# command name -> (alembic callable, default arguments)
COMMANDS: Dict[str, Tuple[Callable, List[str]]] = {
    "upgrade": (command.upgrade, ["head"]),
    "downgrade": (command.downgrade, ["-1"]),
    "stamp": (command.stamp, ["head"]),
    "history": (command.history, []),
    "current": (command.current, []),
    "heads": (command.heads, []),
    "revision": (command.revision, []),
}


# PUBLIC_INTERFACE
def build_config(database_url: Optional[str] = None) -> Config:
    """Alembic config pointing at the packworkx migrations and the configured database."""
    from packworkx.db.config import get_settings

    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    url = database_url or get_settings().database_url
    # ConfigParser interpolation treats % specially (url-encoded passwords)
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """Dispatch a migration command; exits 1 without arguments and 2 on unknown commands."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(f"Usage: run_migrations <{'|'.join(sorted(COMMANDS))}> [args]")
        sys.exit(1)

    name, rest = args[0], args[1:]
    if name == "show":
        if not rest:
            print("Usage: show <revision>")
            sys.exit(2)
        command.show(build_config(), rest[0])
        return
    if name not in COMMANDS:
        print(f"Unsupported migration command: {name}")
        sys.exit(2)

    func, defaults = COMMANDS[name]
    func(build_config(), *(rest or defaults))


if __name__ == "__main__":
    main()
