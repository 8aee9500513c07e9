"""服务层模块.

主要模块:
- jenkins: Jenkins 凭据接口客户端与配置页解析
- projects: 项目成员角色校验
- credentials: 项目凭据的读写编排
"""
