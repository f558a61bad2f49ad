import httpx
from hypothesis import given, strategies as st

from tlb.balancer import BalancerClient
from tlb.config import ServerEndpoint

path_segment = st.text(
    alphabet=st.characters(exclude_categories=["Cs"], exclude_characters="\n/"),
    min_size=1,
    max_size=12,
)
file_name = st.lists(path_segment, min_size=1, max_size=4).map(
    lambda parts: "./" + "/".join(parts)
)


def make_client(assign: frozenset[int]) -> BalancerClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path != "/balance":
            return httpx.Response(404)
        submitted = request.content.decode("utf-8").split("\n")
        chosen = [name for i, name in enumerate(submitted) if i in assign]
        return httpx.Response(200, text="\n".join(chosen))

    return BalancerClient(
        ServerEndpoint(host="localhost", port=8019),
        transport=httpx.MockTransport(handler),
    )


@given(
    files=st.lists(file_name, min_size=1, max_size=30, unique=True),
    assign=st.frozensets(st.integers(min_value=0, max_value=29)),
)
def test_balance_returns_exactly_the_assigned_subset(
    files: list[str], assign: frozenset[int]
) -> None:
    with make_client(assign) as client:
        result = client.balance(files)

    expected = [name for i, name in enumerate(files) if i in assign]
    assert result == expected
    assert set(result) <= set(files)


@given(files=st.lists(file_name, max_size=30))
def test_balance_sends_one_file_per_line(files: list[str]) -> None:
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.content)
        return httpx.Response(200, text="")

    client = BalancerClient(
        ServerEndpoint(host="localhost", port=8019),
        transport=httpx.MockTransport(handler),
    )
    with client:
        assert client.balance(files) == []

    assert seen == ["\n".join(files).encode("utf-8")]
