from __future__ import annotations

from pathlib import Path

import pytest

from gonarrow.oracle import BuildResult


def _module(tmp_path: Path) -> Path:
    (tmp_path / "go.mod").write_text("module example.com/app\n\ngo 1.22\n", encoding="utf-8")
    return tmp_path


def test_missing_pkg_flag_exits_nonzero(tmp_path: Path, capsys):
    from gonarrow.cli import main

    with pytest.raises(SystemExit) as ei:
        main(["-C", str(_module(tmp_path)), "example.com/src:T=>Client"])
    assert ei.value.code == 1
    assert "missing -pkg param" in capsys.readouterr().err


def test_malformed_spec_exits_nonzero(tmp_path: Path, capsys):
    from gonarrow.cli import main

    with pytest.raises(SystemExit) as ei:
        main(["-C", str(_module(tmp_path)), "-pkg", "app", "example.com/src"])
    assert ei.value.code == 1
    assert "invalid target spec" in capsys.readouterr().err


def test_full_run_with_fake_toolchain(monkeypatch, tmp_path: Path, client_type):
    import gonarrow.loader
    import gonarrow.oracle
    from gonarrow.cli import main

    seen: dict = {}

    def fake_load_targets(*, dir, specs, go):  # noqa: ANN001
        seen["specs"] = specs
        return {"example.com/src": {"Client": client_type}}

    class FakeOracle:
        def __init__(self, dir, *, go):  # noqa: ANN001
            self.results = [
                BuildResult(True),
                BuildResult(False, ["./use.go:4:4: c.Load undefined (type Client has no field or method Load)"]),
            ]

        def run_build(self, tags=()):
            return self.results.pop(0)

    monkeypatch.setattr(gonarrow.loader, "load_targets", fake_load_targets)
    monkeypatch.setattr(gonarrow.oracle, "GoBuildOracle", FakeOracle)

    main(["-C", str(_module(tmp_path)), "-pkg", "app", "-f", "deps", "example.com/src:T=>Client"])

    assert seen["specs"] == {"example.com/src": {"T": "Client"}}
    narrow = (tmp_path / "deps.go").read_text(encoding="utf-8")
    assert "package app\n" in narrow
    assert "\tLoad(ctx x0.Context) error\n" in narrow
    assert 'x0 "context"' in narrow
    assert (tmp_path / "deps_impure.go").exists()


def test_version_flag(capsys):
    from gonarrow.cli import main

    main(["--version"])
    assert capsys.readouterr().out.strip()
