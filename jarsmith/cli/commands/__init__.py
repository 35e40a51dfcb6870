"""CLI 子命令实现"""
