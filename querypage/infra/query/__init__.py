from .paginate_query import paginate

__all__ = ["paginate"]
