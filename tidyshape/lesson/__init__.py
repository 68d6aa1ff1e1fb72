from tidyshape.lesson.narratives import NARRATIVES

__all__ = ["NARRATIVES"]
