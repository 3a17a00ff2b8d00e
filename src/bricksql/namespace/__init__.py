from .resolver import NamespaceResolver

__all__ = ["NamespaceResolver"]
