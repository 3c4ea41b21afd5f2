"""
cnc_four_axis_wirecut - 四轴线切割刀路生成库

将描述直纹面的两条导轨转换为四轴线切割机 (X, Y, Z + 钢丝倾角) 的运动程序。

核心流程: 双导轨同步遍历 -> 中点/倾角位姿计算 -> 旋转轴连续性处理
-> 近似重复位姿去重 -> 指令文本序列化。
"""

from .algorithm import JobRow, Wirecutter
from .config import WirecutConfig, load_config, save_config

__version__ = "0.1.0"
__all__ = ["Wirecutter", "JobRow", "WirecutConfig", "load_config", "save_config"]
