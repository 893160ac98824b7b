"""
Migration runner command dispatch.
"""

import pytest

from packworkx.db import run_migrations


class TestRunMigrations:

    def test_no_arguments_prints_usage(self, capsys):
        with pytest.raises(SystemExit) as exc:
            run_migrations.main([])
        assert exc.value.code == 1
        assert "upgrade" in capsys.readouterr().out

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit) as exc:
            run_migrations.main(["migrate"])
        assert exc.value.code == 2

    def test_config_points_at_packworkx_migrations(self):
        cfg = run_migrations.build_config("postgresql+asyncpg://crm:p%40ss@db/packworkx")
        assert cfg.get_main_option("script_location") == str(run_migrations.MIGRATIONS_DIR)
        assert (run_migrations.MIGRATIONS_DIR / "env.py").exists()
        assert cfg.get_main_option("sqlalchemy.url") == "postgresql+asyncpg://crm:p%40ss@db/packworkx"

    def test_commands_get_default_arguments(self, monkeypatch):
        calls = []

        def fake(cfg, *args):
            calls.append(args)

        monkeypatch.setitem(run_migrations.COMMANDS, "upgrade", (fake, ["head"]))
        monkeypatch.setitem(run_migrations.COMMANDS, "downgrade", (fake, ["-1"]))
        run_migrations.main(["upgrade"])
        run_migrations.main(["downgrade", "base"])
        assert calls == [("head",), ("base",)]
