import pytest

from gonarrow.descriptors import Basic, BasicKind, Method, Named, NamedType, Signature, Var


def _sig(params=(), results=(), variadic=False) -> Signature:
    return Signature(params=tuple(params), results=tuple(results), variadic=variadic)


@pytest.fixture
def client_type() -> NamedType:
    # type T struct{}; func (T) Bar() int; func (T) Foo(); func (*T) Load(ctx context.Context) error; func (T) baz()
    return NamedType(
        name="T",
        pkg="example.com/src",
        methods=(
            Method("Bar", _sig(results=[Var(Basic(BasicKind.INT))])),
            Method("Foo", _sig()),
            Method(
                "Load",
                _sig(
                    params=[Var(Named("Context", "context"), "ctx")],
                    results=[Var(Named("error"))],
                ),
            ),
            Method("baz", _sig()),
        ),
    )


@pytest.fixture
def other_type() -> NamedType:
    return NamedType(
        name="T2",
        pkg="example.com/src",
        methods=(Method("Qux", _sig(results=[Var(Named("Item"))])),),
    )
