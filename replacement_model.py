import math
from collections import OrderedDict, deque, namedtuple
from types import MappingProxyType

# 单步记录：页号、Hit/Miss、所在内存块、被换出的页、当前内存快照
Step = namedtuple("Step", ["page", "status", "frame", "swapped", "memory"])

# 一次模拟的结果：最终内存、缺页数、逐步轨迹
SimulationResult = namedtuple("SimulationResult", ["name", "memory", "page_faults", "steps"])

# 一次比较的报告：各算法缺页数、最优算法、各算法详细结果
RunReport = namedtuple("RunReport", ["page_faults", "best_algorithm", "results"])

# Belady 异常的经典测试序列
BELADY_SEQUENCE = (1, 2, 3, 4, 1, 2, 5, 1, 2, 3, 4, 5)


class FrameTable:
    """
    物理内存帧表

    memory 保存每个内存块中的页（None 表示空闲），
    另用字典记录 页 -> 内存块 以便 O(1) 判断是否命中
    """

    def __init__(self, memory_blocks):
        if not isinstance(memory_blocks, int) or isinstance(memory_blocks, bool) or memory_blocks <= 0:
            raise ValueError(f"memory_blocks must be a positive integer, got {memory_blocks!r}")
        self.memory_blocks = memory_blocks
        self.memory = [None] * memory_blocks
        self._slots = {}

    def __contains__(self, page):
        return page in self._slots

    def __len__(self):
        return len(self._slots)

    """页所在的内存块"""
    def index(self, page):
        return self._slots[page]

    """第一个空闲内存块，从左到右查找，没有则返回 -1"""
    def free_index(self):
        if len(self._slots) == self.memory_blocks:
            return -1
        return self.memory.index(None)

    """装入页面，返回被换出的页"""
    def load(self, idx, page):
        swapped_out = self.memory[idx]
        if swapped_out is not None:
            del self._slots[swapped_out]
        self.memory[idx] = page
        self._slots[page] = idx
        return swapped_out

    def snapshot(self):
        return tuple(self.memory)


class RecencyOrder:
    """
    LRU 的访问顺序：从最久未用到最近使用

    重复的页只保留最近的位置，长度超过 capacity 时从队首裁剪
    """

    def __init__(self, capacity):
        self.capacity = capacity
        self._order = OrderedDict()

    def touch(self, page):
        if page in self._order:
            self._order.move_to_end(page)
        else:
            self._order[page] = True
        while len(self._order) > self.capacity:
            self._order.popitem(last=False)

    """最久未使用的页（队首）"""
    def least_recent(self):
        return next(iter(self._order))

    def discard(self, page):
        self._order.pop(page, None)

    def pages(self):
        return list(self._order)


class ArrivalQueue:
    """FIFO 的装入队列：命中时不调整顺序"""

    def __init__(self):
        self._queue = deque()

    def push(self, page):
        self._queue.append(page)

    def pop_oldest(self):
        return self._queue.popleft()

    def pages(self):
        return list(self._queue)


class LRUPolicy:

    def __init__(self, reference_string, memory_blocks):
        self.order = RecencyOrder(memory_blocks)

    def victim(self, table, current_time):
        page = self.order.least_recent()
        self.order.discard(page)
        return table.index(page)

    def loaded(self, page, current_time):
        pass

    """每次访问（命中或缺页）都移到队尾"""
    def accessed(self, page, current_time):
        self.order.touch(page)


class OptimalPolicy:

    def __init__(self, reference_string, memory_blocks):
        self.reference_string = reference_string

    def next_use(self, page, current_time):
        """page 在未处理序列中下次出现的距离，不再出现则为 inf"""
        future_pages = self.reference_string[current_time + 1:]
        try:
            return future_pages.index(page)
        except ValueError:
            return math.inf

    """选择未来最晚使用的页面，距离相同取内存中靠前的"""
    def victim(self, table, current_time):
        max_dist = -1
        victim_idx = -1
        for i, page in enumerate(table.memory):
            dist = self.next_use(page, current_time)
            if dist > max_dist:
                max_dist = dist
                victim_idx = i
        return victim_idx

    def loaded(self, page, current_time):
        pass

    def accessed(self, page, current_time):
        pass


class FIFOPolicy:

    def __init__(self, reference_string, memory_blocks):
        self.queue = ArrivalQueue()

    def victim(self, table, current_time):
        return table.index(self.queue.pop_oldest())

    def loaded(self, page, current_time):
        self.queue.push(page)

    def accessed(self, page, current_time):
        pass


"""
用指定策略跑完整个访问序列

policy_factory(reference_string, memory_blocks) 返回策略对象，
策略对象需提供 victim / loaded / accessed 三个钩子
"""
def simulate(policy_factory, reference_string, memory_blocks, name=None):
    reference_string = tuple(reference_string)
    table = FrameTable(memory_blocks)
    policy = policy_factory(reference_string, memory_blocks)
    page_faults = 0
    steps = []

    for current_time, page in enumerate(reference_string):
        if page is None:
            raise ValueError(f"reference {current_time} is None, which marks an empty frame")

        if page in table:
            status = "Hit"
            swapped_out = None
            target_idx = table.index(page)
        else:
            status = "Miss"
            page_faults += 1
            target_idx = table.free_index()
            # 无空闲帧时执行页面置换
            if target_idx == -1:
                target_idx = policy.victim(table, current_time)
            swapped_out = table.load(target_idx, page)
            policy.loaded(page, current_time)

        policy.accessed(page, current_time)
        steps.append(Step(page, status, target_idx, swapped_out, table.snapshot()))

    return SimulationResult(name or policy_factory.__name__, table.snapshot(), page_faults, tuple(steps))


def lru(reference_string, memory_blocks):
    return simulate(LRUPolicy, reference_string, memory_blocks, name="LRU")


def optimal(reference_string, memory_blocks):
    return simulate(OptimalPolicy, reference_string, memory_blocks, name="Optimal")


def fifo(reference_string, memory_blocks):
    return simulate(FIFOPolicy, reference_string, memory_blocks, name="FIFO")


# 按比较顺序排列，缺页数相同时靠前的算法胜出
ALGORITHMS = MappingProxyType({
    "LRU": lru,
    "Optimal": optimal,
    "FIFO": fifo,
})


"""
所有算法跑同一序列，返回各自缺页数和缺页最少的算法
"""
def run_all(reference_string, memory_blocks, algorithms=ALGORITHMS):
    reference_string = tuple(reference_string)
    results = {
        name: algorithm(reference_string, memory_blocks)
        for name, algorithm in algorithms.items()
    }

    page_faults = {name: res.page_faults for name, res in results.items()}
    best_algo = ""
    min_faults = math.inf
    for name, faults in page_faults.items():
        if faults < min_faults:
            min_faults = faults
            best_algo = name

    return RunReport(page_faults, best_algo, results)
