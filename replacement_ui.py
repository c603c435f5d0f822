import math
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import Footer, Static, Button, RichLog, Label, Input
from textual.reactive import reactive
from textual_plotext import PlotextPlot

from reference_input import InputError, InvalidFrameCountError, parse_simulation_input
from replacement_model import ALGORITHMS, BELADY_SEQUENCE, run_all

MIN_FRAMES = 1
MAX_FRAMES = 10

# 按钮 id -> 算法名
VIEW_BUTTONS = {
    "btn-lru": "LRU",
    "btn-optimal": "Optimal",
    "btn-fifo": "FIFO",
}


class AlgoStatCard(Static):
    """
    算法统计卡片组件

    显示单个算法的缺页数、缺页率以及是否为最优算法
    """
    def __init__(self, algo_name):
        super().__init__(id=f"card-{algo_name.lower()}")
        self.algo_name = algo_name

    def compose(self) -> ComposeResult:
        yield Label(self.algo_name, classes="card-title")
        yield Label("--", classes="card-faults")
        yield Label("0.0%", classes="card-rate")
        yield Label("", classes="card-status")

    def update_data(self, page_faults: int, fault_rate: float, is_best: bool):
        """更新卡片数据"""
        self.query_one(".card-faults").update(f"Faults: {page_faults}")
        self.query_one(".card-rate").update(f"{fault_rate:.1f}%")
        self.query_one(".card-status").update("BEST" if is_best else "")

        if is_best:
            self.add_class("card-best")
        else:
            self.remove_class("card-best")

    def reset(self):
        """重置显示"""
        self.query_one(".card-faults").update("--")
        self.query_one(".card-rate").update("0.0%")
        self.query_one(".card-status").update("")
        self.remove_class("card-best")

    def set_active(self, is_active: bool):
        """设置是否为当前查看的算法"""
        if is_active:
            self.add_class("card-active")
        else:
            self.remove_class("card-active")


class MemBlock(Static):
    """
    内存块组件

    显示模拟结束时该帧中的页以及装入时刻
    """
    frame_idx = reactive("0")
    page_num = reactive("--")
    meta_info = reactive("")

    def compose(self) -> ComposeResult:
        yield Label(f"#{self.frame_idx}", classes="mem-idx")
        yield Label(self.page_num, classes="mem-page")
        yield Label(self.meta_info, classes="mem-meta")

    def update_state(self, idx: int, page, loaded_at, is_last: bool):
        """
        根据模拟结果更新视图

        Args:
            idx: 内存帧号
            page: 帧中的页（None 表示空闲）
            loaded_at: 该页装入时的步号
            is_last: 是否为最后一次访问落在的帧
        """
        self.query_one(".mem-idx").update(f"#{idx}")
        self.classes = ""

        if page is None:
            self.query_one(".mem-page").update("--")
            self.query_one(".mem-meta").update("EMPTY")
            self.add_class("block-empty")
            return

        self.query_one(".mem-page").update(str(page))
        self.query_one(".mem-meta").update(f"IN:{loaded_at}")
        self.add_class("block-active")
        if is_last:
            self.add_class("block-last")


class ReplacementSimApp(App):
    """页面置换算法比较 TUI 应用"""
    CSS_PATH = "styles.tcss"

    BINDINGS = [
        ("ctrl+b", "belady", "Belady"),
        ("ctrl+r", "reset", "Reset"),
        ("ctrl+c", "quit", "Quit"),
    ]

    def __init__(self, memory_blocks=3):
        super().__init__()
        self.current_blocks = memory_blocks
        self.view_algo_name = "LRU"
        self.report = None
        self.last_error = None
        self.mem_block_refs = []
        self.algo_names = list(ALGORITHMS)

    def compose(self) -> ComposeResult:
        yield Label("Page Replacement Simulator", classes="app-title")

        with Container(id="stats-panel"):
            for name in self.algo_names:
                yield AlgoStatCard(name)

        with Container(id="controls-panel"):
            with Container(id="setting-row"):
                yield Label("Ref:")
                yield Input(placeholder="e.g. 1 2 3 4 1 2 5", id="input-ref")
                yield Label(f"RAM ({MIN_FRAMES}-{MAX_FRAMES}):", classes="size-label")
                yield Input(placeholder="3", value=str(self.current_blocks), type="integer", id="input-size")

            with Container(id="algo-buttons"):
                yield Button("LRU", id="btn-lru", variant="primary")
                yield Button("OPT", id="btn-optimal", variant="default")
                yield Button("FIFO", id="btn-fifo", variant="default")

            with Container(classes="action-row"):
                yield Button("RUN", id="btn-run", variant="success")
                yield Button("BELADY", id="btn-belady", variant="error")

        with Container(id="log-panel"):
            with Container(id="chart-container"):
                yield PlotextPlot(id="fault-chart-plot")
            yield RichLog(id="sys-log", markup=True, wrap=True)

        yield Container(id="memory-panel")
        yield Footer()

    async def on_mount(self):
        self.query_one("#sys-log").write("System Initialized.")
        self.update_active_card_highlight(self.view_algo_name)
        self.init_chart()
        await self.change_memory_size(self.current_blocks)

    def init_chart(self):
        plt = self.query_one("#fault-chart-plot", PlotextPlot).plt
        plt.title("Page Faults")
        plt.theme("pro")
        plt.xlabel("")
        plt.ylabel("Faults")

    async def on_input_submitted(self, event: Input.Submitted):
        """回车即运行模拟"""
        if event.input.id in ("input-ref", "input-size"):
            await self.run_simulation()

    async def on_button_pressed(self, event):
        """处理按钮点击事件"""
        bid = event.button.id
        if bid == "btn-run":
            await self.run_simulation()
        elif bid == "btn-belady":
            self.action_belady()
        elif bid in VIEW_BUTTONS:
            self.set_view_algorithm(VIEW_BUTTONS[bid])

    async def run_simulation(self):
        """校验输入，运行所有算法并刷新界面；校验失败时界面保持不变"""
        log = self.query_one("#sys-log", RichLog)
        ref_text = self.query_one("#input-ref", Input).value
        size_text = self.query_one("#input-size", Input).value

        try:
            pages, frames = parse_simulation_input(ref_text, size_text)
            if frames > MAX_FRAMES:
                raise InvalidFrameCountError(frames)
        except InputError as exc:
            self.last_error = str(exc)
            log.write(f"[red]Error: {exc}[/]")
            return None

        self.last_error = None
        self.report = run_all(pages, frames)

        if frames != self.current_blocks or len(self.mem_block_refs) != frames:
            await self.change_memory_size(frames)

        log.clear()
        log.write(f"Seq: {' '.join(str(p) for p in pages)} │ RAM: {frames}")
        for name in self.algo_names:
            faults = self.report.page_faults[name]
            log.write(f"  {name:<8} {faults:>3} faults")
        log.write(f"[bold green]Best Algorithm: {self.report.best_algorithm}[/]")

        self.update_cards()
        self.refresh_chart()
        self.show_memory()
        self.write_trace()
        return self.report

    def action_belady(self):
        """填入 Belady 异常序列"""
        self.query_one("#input-ref", Input).value = " ".join(str(p) for p in BELADY_SEQUENCE)

        log = self.query_one("#sys-log", RichLog)
        log.write("[bold magenta]=== Belady's Anomaly Demo ===[/]")
        log.write("Seq: " + ",".join(str(p) for p in BELADY_SEQUENCE))
        log.write("1. Set RAM to 3 -> Run -> Check FIFO Faults (Expected: 9)")
        log.write("2. Set RAM to 4 -> Run -> Check FIFO Faults (Expected: 10)")

    async def action_reset(self):
        """清空结果"""
        self.report = None
        self.last_error = None
        self.update_ui_reset()
        self.refresh_chart()
        for i, block in enumerate(self.mem_block_refs):
            block.update_state(i, None, None, False)
        self.query_one("#sys-log").write("[bold red]System Reset.[/]")

    async def change_memory_size(self, size):
        """修改内存大小，重建内存块"""
        self.current_blocks = size

        panel = self.query_one("#memory-panel")
        await panel.remove_children()
        self.mem_block_refs = [MemBlock() for _ in range(size)]
        await panel.mount(*self.mem_block_refs)
        for i, block in enumerate(self.mem_block_refs):
            block.update_state(i, None, None, False)

        self.update_memory_grid_layout(size)

    def update_memory_grid_layout(self, count):
        cols = 2 if count <= 4 else (3 if count <= 6 else 4)
        rows = math.ceil(count / cols)
        panel = self.query_one("#memory-panel")
        panel.styles.grid_size_columns = cols
        panel.styles.grid_size_rows = rows

    def set_view_algorithm(self, algo):
        self.view_algo_name = algo
        self.query_one("#sys-log").write(f"View: {algo}")

        for b_id, name in VIEW_BUTTONS.items():
            btn = self.query_one(f"#{b_id}", Button)
            btn.variant = "primary" if name == algo else "default"

        self.update_active_card_highlight(algo)
        if self.report is not None:
            self.show_memory()
            self.write_trace()

    def update_active_card_highlight(self, active_algo):
        for name in self.algo_names:
            card = self.query_one(f"#card-{name.lower()}", AlgoStatCard)
            card.set_active(name == active_algo)

    def update_cards(self):
        total = len(self.report.results[self.algo_names[0]].steps)
        for name in self.algo_names:
            faults = self.report.page_faults[name]
            fault_rate = (faults / total) * 100 if total > 0 else 0
            card = self.query_one(f"#card-{name.lower()}", AlgoStatCard)
            card.update_data(faults, fault_rate, name == self.report.best_algorithm)

    def refresh_chart(self):
        """刷新缺页数柱状图"""
        plot_widget = self.query_one("#fault-chart-plot", PlotextPlot)
        plt = plot_widget.plt
        plt.clear_data()

        if self.report is not None:
            names = list(self.report.page_faults)
            plt.bar(names, [self.report.page_faults[n] for n in names])

        plot_widget.refresh()

    def show_memory(self):
        """显示当前查看算法的最终内存"""
        result = self.report.results[self.view_algo_name]
        loaded_at = {}
        for t, step in enumerate(result.steps):
            if step.status == "Miss":
                loaded_at[step.frame] = t
        last_frame = result.steps[-1].frame if result.steps else -1

        limit = min(len(self.mem_block_refs), len(result.memory))
        for i in range(limit):
            self.mem_block_refs[i].update_state(i, result.memory[i], loaded_at.get(i), i == last_frame)

    def write_trace(self):
        """打印当前查看算法的逐步轨迹"""
        log = self.query_one("#sys-log", RichLog)
        result = self.report.results[self.view_algo_name]
        log.write(f"[bold]{result.name} trace[/]")

        for t, step in enumerate(result.steps):
            status_str = "[red]MISS[/]" if step.status == "Miss" else "[green]HIT [/]"
            frames_str = " ".join("--" if p is None else f"{p:>2}" for p in step.memory)
            msg = f"{status_str} │ t={t:>2} │ [cyan]Pg:{step.page:>2}[/] → Fr:{step.frame} │ {frames_str}"
            if step.swapped is not None:
                msg += f" │ Swap: Pg{step.swapped:>2}"
            log.write(msg)

    def update_ui_reset(self):
        """重置所有卡片显示"""
        for name in self.algo_names:
            self.query_one(f"#card-{name.lower()}", AlgoStatCard).reset()
