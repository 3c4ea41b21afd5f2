"""
errors - 刀路生成异常类型

所有合成阶段的异常都继承自 WirecutError，任何一个都会中止当前刀路生成。
"""


class WirecutError(Exception):
    """线切割刀路生成失败的基类。"""

    pass


class DegenerateVectorError(WirecutError):
    """方向向量与切割平面法向平行（或为零向量），无法计算钢丝倾角。"""

    pass


class AngleResolutionError(WirecutError):
    """象限判别在容差内无一匹配。"""

    pass


class UnsupportedIntersectionError(WirecutError):
    """远端曲线在截面平面内重叠/相切，无法得到单点交点。"""

    pass


class MissingInputFieldError(WirecutError):
    """输入任务表或配置缺少必需字段。"""

    pass


class UnsupportedOperationError(WirecutError):
    """请求了尚未实现的功能（例如曲线延伸）。"""

    pass


class InvalidCurveError(WirecutError):
    """曲线 ID 无法解析为可离散化的曲线对象。"""

    pass


class ConfigError(WirecutError):
    """配置校验失败。"""

    pass
