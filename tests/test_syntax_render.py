from gonarrow import syntax as ast


def test_bidirectional_channel_of_receive_channel_is_parenthesized():
    inner = ast.ChanType(dir=ast.RECV, value=ast.Ident("int"))
    assert ast.render(ast.ChanType(dir=ast.SEND | ast.RECV, value=inner)) == "chan (<-chan int)"
    assert ast.render(ast.ChanType(dir=ast.SEND, value=inner)) == "chan<- <-chan int"


def test_partially_named_parameters_get_blank_names():
    ft = ast.FuncType(
        params=(
            ast.Field(type=ast.Ident("int"), names=("n",)),
            ast.Field(type=ast.Ident("string")),
        )
    )
    assert ast.render(ft) == "func(n int, _ string)"


def test_func_type_in_result_position():
    inner = ast.FuncType(results=(ast.Field(type=ast.Ident("error")),))
    ft = ast.FuncType(results=(ast.Field(type=inner),))
    assert ast.render(ft) == "func() func() error"


def test_tag_quoting():
    assert ast.quote_tag('json:"a"') == '`json:"a"`'
    assert ast.quote_tag('weird:"`"') == '"weird:\\"`\\""'


def test_render_interface_declaration():
    spec = ast.TypeSpec(
        name="Client",
        type=ast.InterfaceType(
            methods=(
                ast.Field(type=ast.FuncType(), names=("Foo",)),
                ast.Field(
                    type=ast.FuncType(
                        params=(ast.Field(type=ast.Ellipsis(elt=ast.Ident("string")), names=("xs",)),),
                        results=(ast.Field(type=ast.Ident("int")),),
                    ),
                    names=("Bar",),
                ),
            )
        ),
        doc=["Client does things."],
    )
    assert ast.render_type_spec(spec) == [
        "// Client does things.",
        "type Client interface {",
        "\tFoo()",
        "\tBar(xs ...string) int",
        "}",
    ]


def test_render_empty_interface_declaration():
    spec = ast.TypeSpec(name="Other", type=ast.InterfaceType())
    assert ast.render_type_spec(spec) == ["type Other interface{}"]
