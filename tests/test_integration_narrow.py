from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

pytestmark = pytest.mark.skipif(
    os.environ.get("GONARROW_INTEGRATION") != "1",
    reason="set GONARROW_INTEGRATION=1 to run integration tests",
)


def _write_go_test_module(mod_dir: Path) -> Path:
    (mod_dir / "go.mod").write_text(
        "\n".join(
            [
                "module example.com/testmod",
                "",
                "go 1.22",
                "",
            ]
        ),
        encoding="utf-8",
    )
    src = mod_dir / "src"
    src.mkdir()
    (src / "src.go").write_text(
        "\n".join(
            [
                "package src",
                "",
                'import "context"',
                "",
                "type Item struct{ Name string }",
                "",
                "type T struct{}",
                "",
                "func (T) Foo() {}",
                "func (T) Bar() int { return 1 }",
                "func (T) baz() {}",
                "func (*T) Load(ctx context.Context, keys ...string) (map[string][]Item, error) {",
                "    return nil, nil",
                "}",
                "func (T) Watch() <-chan struct{ N int `json:\"n\"` } { return nil }",
                "",
                "type T2 struct{}",
                "",
                "func (T2) Qux(f func(int) error) *Item { return nil }",
                "",
            ]
        ),
        encoding="utf-8",
    )
    app = mod_dir / "app"
    app.mkdir()
    (app / "use.go").write_text(
        "\n".join(
            [
                "package app",
                "",
                "func Use(c Client) {",
                "    c.Foo()",
                "}",
                "",
                "func Keep(o Other) {}",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return app


def _run_gonarrow(app_dir: Path, *extra: str) -> None:
    subprocess.check_call(
        [
            sys.executable,
            "-m",
            "gonarrow",
            "-C",
            str(app_dir),
            "-pkg",
            "app",
            *extra,
            "example.com/testmod/src:T=>Client,T2=>Other",
        ]
    )


def test_narrowing_against_real_go_build(tmp_path: Path):
    mod_dir = tmp_path / "gomod"
    mod_dir.mkdir()
    app_dir = _write_go_test_module(mod_dir)

    _run_gonarrow(app_dir, "--verify")

    complete = (app_dir / "interfaces_impure.go").read_text(encoding="utf-8")
    assert "Bar() int" in complete
    assert "Load(ctx x0.Context, keys ...string) (map[string][]x1.Item, error)" in complete
    assert "Qux(f func(int) error) *x1.Item" in complete
    assert "baz" not in complete

    narrow = (app_dir / "interfaces.go").read_text(encoding="utf-8")
    assert "type Client interface {\n\tFoo()\n}" in narrow
    assert "type Other interface{}" in narrow
    assert "Bar" not in narrow

    subprocess.check_call(["go", "build", "."], cwd=str(app_dir))
    subprocess.check_call(["go", "build", "-tags", "impure", "."], cwd=str(app_dir))


def test_unknown_type_fails_before_writing(tmp_path: Path):
    mod_dir = tmp_path / "gomod"
    mod_dir.mkdir()
    app_dir = _write_go_test_module(mod_dir)

    proc = subprocess.run(
        [
            sys.executable,
            "-m",
            "gonarrow",
            "-C",
            str(app_dir),
            "-pkg",
            "app",
            "example.com/testmod/src:Missing=>Client",
        ],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    assert proc.returncode == 1
    assert "no such type" in proc.stderr
    assert not (app_dir / "interfaces_impure.go").exists()


def test_promoted_methods_are_part_of_the_interface(tmp_path: Path):
    mod_dir = tmp_path / "gomod"
    mod_dir.mkdir()
    app_dir = _write_go_test_module(mod_dir)
    (mod_dir / "src" / "embed.go").write_text(
        "\n".join(
            [
                "package src",
                "",
                'import "sync"',
                "",
                "type Base struct{}",
                "",
                "func (*Base) Ping() error { return nil }",
                "",
                "type Conn struct {",
                "    Base",
                "    sync.Mutex",
                "}",
                "",
                "func (Conn) Close() {}",
                "",
            ]
        ),
        encoding="utf-8",
    )
    (app_dir / "conn.go").write_text(
        "\n".join(
            [
                "package app",
                "",
                "func Hold(c Locker) {",
                "    c.Lock()",
                "    defer c.Unlock()",
                "    _ = c.Ping()",
                "}",
                "",
            ]
        ),
        encoding="utf-8",
    )

    subprocess.check_call(
        [
            sys.executable,
            "-m",
            "gonarrow",
            "-C",
            str(app_dir),
            "-pkg",
            "app",
            "--verify",
            "example.com/testmod/src:T=>Client,T2=>Other,Conn=>Locker",
        ]
    )

    complete = (app_dir / "interfaces_impure.go").read_text(encoding="utf-8")
    assert "\tPing() error\n" in complete
    assert "\tLock()\n" in complete
    assert "\tClose()\n" in complete

    narrow = (app_dir / "interfaces.go").read_text(encoding="utf-8")
    assert "type Locker interface {\n\tLock()\n\tPing() error\n\tUnlock()\n}" in narrow
    assert "Close" not in narrow
