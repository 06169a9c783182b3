import math

import pytest

from conftest import FakeNodeClient, make_validators
from dtos.validator import ValidatorPage
from services.errors import FetchError
from services.node import Node
from services.validators import ValidatorSetCollector


class TestPagination:
    """Paging runs until the running count reaches the reported total."""

    @pytest.mark.asyncio
    async def test_three_pages(self):
        client = FakeNodeClient(validators=make_validators(250))

        vals = await ValidatorSetCollector(client).collect(42)

        assert len(vals.validators) == 250
        assert vals.count == vals.total == 250
        assert vals.block_height == 42
        assert client.calls == [("validators", 42, p) for p in (1, 2, 3)]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("total", [1, 99, 100, 101, 200, 201, 1000])
    async def test_call_count(self, total):
        client = FakeNodeClient(validators=make_validators(total))

        vals = await ValidatorSetCollector(client).collect(7)

        assert len(client.calls) == math.ceil(total / 100)
        assert [v.address for v in vals.validators] == [
            v.address for v in make_validators(total)
        ]
        assert len({v.address for v in vals.validators}) == total

    @pytest.mark.asyncio
    async def test_smaller_page_size(self):
        client = FakeNodeClient(validators=make_validators(10))

        vals = await ValidatorSetCollector(client, per_page=3).collect(1)

        assert len(vals.validators) == 10
        assert len(client.calls) == 4

    @pytest.mark.asyncio
    async def test_empty_set_takes_one_call(self):
        client = FakeNodeClient(validators=[])

        vals = await ValidatorSetCollector(client).collect(5)

        assert vals.validators == []
        assert vals.total == 0
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_node_facade_uses_configured_page_size(self):
        client = FakeNodeClient(validators=make_validators(30))

        vals = await Node(client, per_page=10).collect_validators(3)

        assert len(vals.validators) == 30
        assert len(client.calls) == 3

    @pytest.mark.parametrize("per_page", [0, 101])
    def test_page_size_bounds(self, client, per_page):
        with pytest.raises(ValueError):
            ValidatorSetCollector(client, per_page=per_page)

    @pytest.mark.parametrize("per_page", [0, 101])
    def test_node_passes_page_size_through(self, client, per_page):
        with pytest.raises(ValueError):
            Node(client, per_page=per_page)


class TestFailures:
    """Any inconsistency aborts the collection without a partial set."""

    @pytest.mark.asyncio
    async def test_page_failure_aborts(self):
        client = FakeNodeClient(validators=make_validators(250))
        client.fail(("validators", 9, 2))

        with pytest.raises(FetchError) as exc:
            await ValidatorSetCollector(client).collect(9)

        assert exc.value.height == 9
        assert exc.value.page == 2
        assert ("validators", 9, 3) not in client.calls

    @pytest.mark.asyncio
    async def test_total_change_between_pages(self):
        client = FakeNodeClient(validators=make_validators(250))
        client.totals[2] = 260

        with pytest.raises(FetchError) as exc:
            await ValidatorSetCollector(client).collect(9)

        assert exc.value.page == 2
        assert "changed" in str(exc.value)

    @pytest.mark.asyncio
    async def test_empty_page_before_total(self):
        client = FakeNodeClient(validators=make_validators(150))
        client.totals = {1: 300, 2: 300, 3: 300}

        with pytest.raises(FetchError) as exc:
            await ValidatorSetCollector(client).collect(9)

        assert exc.value.page == 3

    @pytest.mark.asyncio
    async def test_overshoot(self):
        client = FakeNodeClient(validators=make_validators(150))
        client.totals = {1: 120, 2: 120}

        with pytest.raises(FetchError) as exc:
            await ValidatorSetCollector(client).collect(9)

        assert "overshoot" in str(exc.value)

    @pytest.mark.asyncio
    async def test_duplicates_dropped_then_rejected(self):
        class RepeatingClient(FakeNodeClient):
            async def get_validators(self, height, page, per_page):
                self.calls.append(("validators", height, page))
                vals = self.validators[:2]
                return ValidatorPage(
                    block_height=height, validators=vals, count=2, total=4
                )

        client = RepeatingClient(validators=make_validators(2))

        with pytest.raises(FetchError) as exc:
            await ValidatorSetCollector(client).collect(9)

        assert "2 distinct validators" in str(exc.value)
        assert len(client.calls) == 2
