"""
页面置换模拟器 - 主程序入口

对同一访问序列比较三种页面置换算法的缺页数：
- LRU (最近最少使用)
- Optimal (最佳置换)
- FIFO (先进先出)

使用方法:
    uv run main.py
    或
    python main.py
"""
from replacement_ui import ReplacementSimApp

if __name__ == "__main__":
    app = ReplacementSimApp()
    app.run()
