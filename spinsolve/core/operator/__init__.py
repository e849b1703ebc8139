"""PDE演算子の指定パッケージ"""

from .spec import DiscreteOperator, OperatorSpec, is_conjugate_symmetric, stack_components

__all__ = ["OperatorSpec", "DiscreteOperator", "stack_components", "is_conjugate_symmetric"]
