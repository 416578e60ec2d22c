from .add_job import AddJobDialog

__all__ = ["AddJobDialog"]
