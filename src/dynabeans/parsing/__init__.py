"""Parsing module for the contract definition DSL."""

from dynabeans.parsing.contract_parser import (
    ContractParser,
    ContractSpec,
    MethodSpec,
    ParamSpec,
    TypeRef,
)

__all__ = [
    "ContractParser",
    "ContractSpec",
    "MethodSpec",
    "ParamSpec",
    "TypeRef",
]
