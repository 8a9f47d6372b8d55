from logdb.engine.engine import Engine

__all__ = ["Engine"]
