from gonarrow.imports import ImportTable


def test_aliases_follow_first_seen_order():
    t = ImportTable()
    assert t.alias_for("context") == 0
    assert t.alias_for("io") == 1
    assert t.alias_for("example.com/a") == 2


def test_reencountering_a_package_keeps_its_alias():
    t = ImportTable()
    t.alias_for("context")
    t.alias_for("io")
    assert t.alias_for("context") == 0
    assert t.alias_for("io") == 1
    assert len(t) == 2
    assert t.items() == [("context", 0), ("io", 1)]


def test_tables_are_independent():
    a = ImportTable()
    b = ImportTable()
    a.alias_for("io")
    assert b.alias_for("context") == 0
    assert "io" not in b


def test_render_import_block():
    t = ImportTable()
    assert t.render() == []
    assert t.name_for("context") == "x0"
    assert t.name_for("example.com/a/b") == "x1"
    assert t.render() == [
        "import (",
        '\tx0 "context"',
        '\tx1 "example.com/a/b"',
        ")",
    ]
