from .container import Container
from .section import Section

__all__ = ['Container', 'Section']
