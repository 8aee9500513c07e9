"""Pydantic schemas.

集中维护写路径的 payload schema, 用于:
- 类型转换与默认值
- 按凭据类型解码 content(输出中文错误文案)
"""
