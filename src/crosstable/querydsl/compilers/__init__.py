from .base import BaseCompiler
from .filters import FilterCompiler, filter_compiler
from .params import ParamSerializer, param_serializer

__all__ = (
    "BaseCompiler",
    "FilterCompiler",
    "filter_compiler",
    "ParamSerializer",
    "param_serializer",
)
