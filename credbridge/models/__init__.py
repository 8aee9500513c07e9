"""数据模型模块.

主要模型:
- ProjectCredential: 项目与 Jenkins 凭据的归属记录
- ProjectMembership: 项目成员及其角色
"""

__all__ = ["ProjectCredential", "ProjectMembership"]


def __getattr__(name: str):
    """延迟加载模型, 避免初始化周期引发的循环导入."""

    if name not in __all__:
        msg = f"module 'credbridge.models' has no attribute {name}"
        raise AttributeError(msg)

    from importlib import import_module

    module_map = {
        "ProjectCredential": "credbridge.models.project_credential",
        "ProjectMembership": "credbridge.models.project_membership",
    }
    module = import_module(module_map[name])
    return getattr(module, name)
