from .manager import Manager, logger, manager

__all__ = ["Manager", "logger", "manager"]
