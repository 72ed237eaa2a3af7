"""调度 API 模块。"""
