import pytest

from gonarrow.diagnostics import collect_missing_methods, parse_line


@pytest.mark.parametrize(
    ("line", "want"),
    [
        ("./main.go:10:4: c.Foo undefined (type Client has no field or method Foo)", ("Client", "Foo")),
        ("pkg/foo.go:10: t.SomeType has no field or method DoThing", ("SomeType", "DoThing")),
        ("./a.go:3:9: p.Close undefined (type *Client has no field or method Close)", ("Client", "Close")),
        ("./a.go:3:9: v.Get undefined (type app.Store has no field or method Get)", ("Store", "Get")),
    ],
)
def test_parse_missing_method_lines(line: str, want: tuple[str, str]):
    assert parse_line(line) == want


@pytest.mark.parametrize(
    "line",
    [
        "./main.go:3:2: undefined: Bar",
        "./main.go:5:6: x.y undefined (type int has no method y)",
        "# example.com/app",
        "go: downloading example.com/dep v1.0.0",
        "",
    ],
)
def test_other_lines_are_ignored(line: str):
    assert parse_line(line) is None


def test_collect_groups_by_type_in_first_occurrence_order():
    lines = [
        "# example.com/app",
        "./a.go:1:1: c.Foo undefined (type Client has no field or method Foo)",
        "./a.go:2:1: o.Baz undefined (type Other has no field or method Baz)",
        "./a.go:3:1: c.Bar undefined (type Client has no field or method Bar)",
        "./b.go:9:1: c.Foo undefined (type Client has no field or method Foo)",
        "./b.go:10:1: undefined: nope",
        "./b.go:11:1: too many errors",
    ]
    got = collect_missing_methods(lines)
    assert got == {"Client": ["Foo", "Bar"], "Other": ["Baz"]}
    assert list(got) == ["Client", "Other"]


def test_collect_nothing():
    assert collect_missing_methods([]) == {}
    assert collect_missing_methods(["./a.go:1:1: syntax error: unexpected }"]) == {}
