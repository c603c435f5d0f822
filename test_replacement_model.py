"""
页面置换算法测试

Belady 序列的缺页数为手算结果：
    3 块: LRU 10, Optimal 7, FIFO 9
    4 块: LRU 8,  Optimal 6, FIFO 10  (FIFO 的 Belady 异常)
"""
import pytest

from replacement_model import (
    ALGORITHMS,
    BELADY_SEQUENCE,
    ArrivalQueue,
    FrameTable,
    RecencyOrder,
    fifo,
    lru,
    optimal,
    run_all,
)

POLICIES = [lru, optimal, fifo]

SEQUENCES = [
    [],
    [7],
    [1, 1, 1, 1],
    list(BELADY_SEQUENCE),
    [7, 0, 1, 2, 0, 3, 0, 4, 2, 3, 0, 3, 2, 1, 2, 0, 1, 7, 0, 1],
    [0, 4, 1, 4, 2, 4, 3, 4, 2, 4, 0, 4, 1, 4, 2, 4, 3, 4],
    [5, 5, 6, 6, 5, 7, 8, 9, 5, 6],
]


# -- 帧表与辅助结构 ------------------------------------------------------------

class TestFrameTable:

    def test_starts_empty(self):
        table = FrameTable(3)
        assert table.snapshot() == (None, None, None)
        assert len(table) == 0
        assert table.free_index() == 0

    def test_free_index_is_leftmost(self):
        table = FrameTable(3)
        table.load(0, 10)
        table.load(2, 30)
        assert table.free_index() == 1
        table.load(1, 20)
        assert table.free_index() == -1

    def test_load_returns_swapped_page(self):
        table = FrameTable(2)
        assert table.load(0, 1) is None
        table.load(1, 2)
        assert table.load(0, 3) == 1
        assert 1 not in table
        assert table.index(3) == 0

    @pytest.mark.parametrize("blocks", [0, -1, 2.5, None, True])
    def test_rejects_invalid_block_count(self, blocks):
        with pytest.raises(ValueError):
            FrameTable(blocks)


class TestRecencyOrder:

    def test_touch_moves_page_to_back(self):
        order = RecencyOrder(3)
        for page in [1, 2, 3, 1]:
            order.touch(page)
        assert order.pages() == [2, 3, 1]
        assert order.least_recent() == 2

    def test_duplicates_collapse(self):
        order = RecencyOrder(3)
        for page in [4, 4, 4]:
            order.touch(page)
        assert order.pages() == [4]

    def test_trimmed_from_front(self):
        order = RecencyOrder(2)
        for page in [1, 2, 3]:
            order.touch(page)
        assert order.pages() == [2, 3]


class TestArrivalQueue:

    def test_oldest_first(self):
        queue = ArrivalQueue()
        for page in [3, 1, 2]:
            queue.push(page)
        assert queue.pop_oldest() == 3
        assert queue.pages() == [1, 2]


# -- 单个算法 ------------------------------------------------------------------

@pytest.mark.parametrize("blocks, expected", [
    (3, {"LRU": (10, (3, 4, 5)), "Optimal": (7, (4, 2, 5)), "FIFO": (9, (5, 3, 4))}),
    (4, {"LRU": (8, (5, 2, 4, 3)), "Optimal": (6, (4, 2, 3, 5)), "FIFO": (10, (4, 5, 2, 3))}),
])
def test_belady_sequence_golden_values(blocks, expected):
    for policy in POLICIES:
        result = policy(BELADY_SEQUENCE, blocks)
        faults, memory = expected[result.name]
        assert result.page_faults == faults
        assert result.memory == memory


def test_fifo_belady_anomaly():
    assert fifo(BELADY_SEQUENCE, 4).page_faults > fifo(BELADY_SEQUENCE, 3).page_faults


def test_fifo_hits_do_not_reorder():
    # 命中 1 之后，FIFO 仍换出 1；LRU 换出 2
    assert fifo([1, 2, 1, 3], 2).memory == (3, 2)
    assert lru([1, 2, 1, 3], 2).memory == (1, 3)


def test_optimal_tie_breaks_on_first_frame():
    # 1 和 2 以后都不再使用，换出内存中靠前的 1
    result = optimal([1, 2, 3], 2)
    assert result.memory == (3, 2)
    assert result.steps[-1].swapped == 1


def test_optimal_evicts_farthest_future_use():
    result = optimal([1, 2, 3, 2, 1], 2)
    # t=2 时 1 在 1 步后、2 在 0 步后使用，换出 1
    assert result.steps[2].swapped == 1
    assert result.page_faults == 4


@pytest.mark.parametrize("policy", POLICIES)
def test_repeated_page_single_frame(policy):
    result = policy([1, 1, 1, 1], 1)
    assert result.page_faults == 1
    assert result.memory == (1,)


@pytest.mark.parametrize("policy", POLICIES)
def test_empty_sequence(policy):
    result = policy([], 3)
    assert result.page_faults == 0
    assert result.memory == (None, None, None)
    assert result.steps == ()


@pytest.mark.parametrize("policy", POLICIES)
@pytest.mark.parametrize("blocks", [0, -3])
def test_non_positive_frames_fail_fast(policy, blocks):
    with pytest.raises(ValueError):
        policy([1, 2, 3], blocks)


@pytest.mark.parametrize("policy", POLICIES)
def test_none_page_rejected(policy):
    with pytest.raises(ValueError):
        policy([1, None, 2], 2)


@pytest.mark.parametrize("policy", POLICIES)
def test_accepts_hashable_pages(policy):
    result = policy(["a", "b", "a", "c"], 3)
    assert result.page_faults == 3
    assert result.memory == ("a", "b", "c")


@pytest.mark.parametrize("policy", POLICIES)
@pytest.mark.parametrize("sequence", SEQUENCES)
@pytest.mark.parametrize("blocks", [1, 2, 3, 4, 6])
def test_invariants(policy, sequence, blocks):
    result = policy(sequence, blocks)

    assert 0 <= result.page_faults <= len(sequence)
    assert len(result.memory) == blocks
    resident = [p for p in result.memory if p is not None]
    assert len(resident) == len(set(resident))
    assert set(resident) <= set(sequence)

    distinct = len(set(sequence))
    if blocks >= distinct:
        assert result.page_faults == distinct

    assert len(result.steps) == len(sequence)
    assert sum(1 for s in result.steps if s.status == "Miss") == result.page_faults
    for step in result.steps:
        assert step.memory[step.frame] == step.page
        occupied = [p for p in step.memory if p is not None]
        assert len(occupied) == len(set(occupied))


# -- 比较与排名 ----------------------------------------------------------------

def test_registry_order_and_immutability():
    assert list(ALGORITHMS) == ["LRU", "Optimal", "FIFO"]
    with pytest.raises(TypeError):
        ALGORITHMS["LFU"] = lru


def test_run_all_belady_four_frames():
    report = run_all(BELADY_SEQUENCE, 4)
    assert report.page_faults == {"LRU": 8, "Optimal": 6, "FIFO": 10}
    assert report.best_algorithm == "Optimal"
    assert list(report.page_faults) == ["LRU", "Optimal", "FIFO"]


def test_run_all_belady_three_frames():
    report = run_all(BELADY_SEQUENCE, 3)
    assert report.page_faults == {"LRU": 10, "Optimal": 7, "FIFO": 9}
    assert report.best_algorithm == "Optimal"


def test_run_all_ties_go_to_first_in_order():
    assert run_all([1, 1, 1, 1], 1).best_algorithm == "LRU"
    assert run_all([], 2).best_algorithm == "LRU"


def test_run_all_uses_given_registry():
    report = run_all(BELADY_SEQUENCE, 3, algorithms={"FIFO": fifo, "LRU": lru})
    assert report.page_faults == {"FIFO": 9, "LRU": 10}
    assert report.best_algorithm == "FIFO"


@pytest.mark.parametrize("sequence", SEQUENCES)
@pytest.mark.parametrize("blocks", [1, 2, 3, 4])
def test_optimal_never_worse(sequence, blocks):
    faults = run_all(sequence, blocks).page_faults
    assert faults["Optimal"] <= faults["LRU"]
    assert faults["Optimal"] <= faults["FIFO"]


def test_run_all_is_idempotent():
    sequence = [7, 0, 1, 2, 0, 3, 0, 4, 2, 3, 0, 3, 2, 1, 2, 0, 1, 7, 0, 1]
    first = run_all(sequence, 3)
    second = run_all(sequence, 3)
    assert first == second
    assert repr(first) == repr(second)


def test_run_all_does_not_mutate_input():
    sequence = [1, 2, 3, 1, 4]
    run_all(sequence, 2)
    assert sequence == [1, 2, 3, 1, 4]
