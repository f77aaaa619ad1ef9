import pytest
from lazychain import Chain


class TestComposability:
    """Test operation composability and method chaining"""

    def test_collect_reproduces_input(self):
        """Test that collect() with no adapters returns the input in order"""
        data = [5, 3, None, "x", 3]
        assert Chain.from_collection(data).collect() == data

    def test_map_doubles(self):
        result = Chain.from_collection([1, 2, 3, 4]).map(lambda x: x * 2).collect()
        assert result == [2, 4, 6, 8], f"Unexpected result: {result}"

    def test_filter_evens(self):
        result = Chain.from_collection([1, 2, 3, 4, 5]).filter(lambda x: x % 2 == 0).collect()
        assert result == [2, 4], f"Unexpected result: {result}"

    def test_skip_then_take(self):
        result = Chain.from_collection([1, 2, 3, 4, 5]).skip(2).take(2).collect()
        assert result == [3, 4], f"Unexpected result: {result}"

    def test_fold_with_initial(self):
        result = Chain.from_collection([1, 2, 3]).fold(10, lambda acc, x: acc + x)
        assert result == 16, f"Expected 16, got {result}"

    def test_chain_two_collections(self):
        result = Chain.from_collection([1, 2]).chain([3, 4]).collect()
        assert result == [1, 2, 3, 4], f"Unexpected result: {result}"

    def test_cycle_then_take(self):
        result = Chain.from_collection([1, 2]).cycle().take(5).collect()
        assert result == [1, 2, 1, 2, 1], f"Unexpected result: {result}"

    def test_method_chaining(self):
        """Test that methods can be chained together"""
        result = (
            Chain.from_collection(range(20))
            .map(lambda x: x * 2)
            .filter(lambda x: x > 10)
            .skip(3)
            .take(5)
            .collect()
        )

        expected = [18, 20, 22, 24, 26]
        assert result == expected, f"Expected {expected}, got {result}"

    def test_multiple_maps(self):
        """Test composing multiple map operations"""
        result = (
            Chain.from_collection([1, 2, 3, 4, 5])
            .map(lambda x: x * 2)
            .map(lambda x: x + 1)
            .map(lambda x: x * 3)
            .collect()
        )
        assert result == [9, 15, 21, 27, 33], f"Unexpected result: {result}"

    def test_map_changes_element_type(self):
        result = Chain.from_collection([1, 22, 333]).map(str).map(len).collect()
        assert result == [1, 2, 3]

    def test_skip_and_take_composition(self):
        """Test composing skip and take operations"""
        result = (
            Chain.from_collection(range(20))
            .skip(5)
            .take(10)
            .skip(2)
            .take(5)
            .collect()
        )
        assert result == [7, 8, 9, 10, 11], f"Unexpected result: {result}"

    def test_chain_with_another_chain(self):
        """Test appending a chain that has its own adapters"""
        tail = Chain.from_collection(range(10)).filter(lambda x: x > 7)
        result = Chain.from_collection([0]).chain(tail).collect()

        assert result == [0, 8, 9]
        assert tail.consumed, "Appended chain hands over its producer"

    def test_chain_with_generator(self):
        def letters():
            yield "b"
            yield "c"

        result = Chain.from_collection(["a"]).chain(letters()).collect()
        assert result == ["a", "b", "c"]

    def test_chain_then_cycle(self):
        result = Chain.from_collection([1]).chain([2]).cycle().take(5).collect()
        assert result == [1, 2, 1, 2, 1]

    def test_cycle_then_adapters(self):
        result = (
            Chain.from_collection(range(4))
            .cycle()
            .map(lambda x: x * 10)
            .filter(lambda x: x != 20)
            .skip(1)
            .take(6)
            .collect()
        )
        assert result == [10, 30, 0, 10, 30, 0], f"Unexpected result: {result}"

    def test_batch_and_page(self):
        """Test grouping and page selection"""
        batches = Chain.from_collection(range(1, 8)).batch(3).collect()
        assert batches == [(1, 2, 3), (4, 5, 6), (7,)]

        chunks = Chain.from_collection(range(4)).chunk(2).collect()
        assert chunks == [(0, 1), (2, 3)]

        page2 = Chain.from_collection(range(1, 21)).page(2, 5).collect()
        assert page2 == [6, 7, 8, 9, 10]

    def test_paginate(self):
        pages = list(Chain.from_collection(range(7)).paginate(3))
        assert pages == [[0, 1, 2], [3, 4, 5], [6]]


class TestAlgebraicProperties:
    """Test relations that must hold for any finite input"""

    @pytest.mark.parametrize("data", [[], [1], [3, 1, 4, 1, 5, 9, 2, 6], list(range(50))])
    def test_map_preserves_length_and_order(self, data):
        f = lambda x: x * 3 - 1
        assert Chain.from_collection(data).map(f).collect() == [f(x) for x in data]

    @pytest.mark.parametrize("data", [[], [2], [3, 1, 4, 1, 5, 9, 2, 6], list(range(50))])
    def test_filter_is_ordered_subsequence(self, data):
        p = lambda x: x % 3 != 0
        result = Chain.from_collection(data).filter(p).collect()
        assert result == [x for x in data if p(x)]
        assert len(result) <= len(data)

    @pytest.mark.parametrize("n", [0, 1, 3, 8, 20])
    def test_take_and_skip_lengths(self, n):
        data = list(range(8))
        taken = Chain.from_collection(data).take(n).collect()
        skipped = Chain.from_collection(data).skip(n).collect()

        assert len(taken) == min(n, len(data))
        assert len(skipped) == max(0, len(data) - n)
        assert skipped == data[len(data) - len(skipped):], "Skip must yield the suffix"

    @pytest.mark.parametrize("a,b", [([], []), ([1], []), ([], [2, 3]), ([1, 2], [3, 4, 5])])
    def test_chain_concatenates(self, a, b):
        assert Chain.from_collection(a).chain(b).collect() == a + b

    @pytest.mark.parametrize("data", [[], ["x"], list(range(17))])
    def test_fold_counting_matches_count(self, data):
        folded = Chain.from_collection(data).fold(0, lambda acc, _: acc + 1)
        assert folded == Chain.from_collection(data).count()
