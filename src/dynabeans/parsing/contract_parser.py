"""Parser for the contract definition DSL.

Contracts declared in text become ordinary contract classes (subclasses of
``DynaBean`` with abstract accessor methods), so they go through the same
definition and instance machinery as contracts written in Python::

    contract Person {
        getName() -> str
        setName(name: str)
        getAge() -> int
        setAge(int)
    }
    contract Team {
        getMembers() -> Person[]
        getLead() -> Person?
    }
"""

from __future__ import annotations

import inspect
import typing
from abc import abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from dynabeans.bean import DynaBean
from dynabeans.parsing.contract_lexer import ContractLexer
from dynabeans.types import PRIMITIVE_TYPE_NAMES

ARRAY_MODIFIER = "[]"
OPTIONAL_MODIFIER = "?"

# Type names usable in any contract file
BUILTIN_TYPES: dict[str, Any] = {
    **{name: pt.py_type for name, pt in PRIMITIVE_TYPE_NAMES.items()},
    "str": str,
    "bytes": bytes,
    "list": list,
    "set": set,
    "dict": dict,
    "object": object,
    "any": Any,
}


@dataclass
class TypeRef:
    """Reference to a type, with ``[]`` and ``?`` modifiers in source order."""

    name: str
    modifiers: tuple[str, ...] = ()


@dataclass
class ParamSpec:
    """Specification for a method parameter before resolution."""

    type_ref: TypeRef
    name: str | None = None  # None = positional name is generated


@dataclass
class MethodSpec:
    """Specification for a contract method before resolution."""

    name: str
    params: list[ParamSpec] = field(default_factory=list)
    returns: TypeRef | None = None  # None = undeclared (any value)


@dataclass
class ContractSpec:
    """Specification for a contract before resolution."""

    name: str
    parents: list[str] = field(default_factory=list)
    methods: list[MethodSpec] = field(default_factory=list)


class ContractParser:
    """Parser for the contract definition DSL."""

    tokens = ContractLexer.tokens

    def __init__(self) -> None:
        self.lexer = ContractLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : contract_list"""
        p[0] = p[1]

    def p_schema_empty(self, p: yacc.YaccProduction) -> None:
        """schema : empty"""
        p[0] = []

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        p[0] = None

    def p_contract_list_single(self, p: yacc.YaccProduction) -> None:
        """contract_list : contract"""
        p[0] = [p[1]]

    def p_contract_list_multiple(self, p: yacc.YaccProduction) -> None:
        """contract_list : contract_list contract"""
        p[0] = p[1] + [p[2]]

    def p_contract(self, p: yacc.YaccProduction) -> None:
        """contract : CONTRACT IDENTIFIER extends LBRACE member_list RBRACE"""
        p[0] = ContractSpec(name=p[2], parents=p[3], methods=p[5])

    def p_contract_empty(self, p: yacc.YaccProduction) -> None:
        """contract : CONTRACT IDENTIFIER extends LBRACE RBRACE"""
        p[0] = ContractSpec(name=p[2], parents=p[3], methods=[])

    def p_extends(self, p: yacc.YaccProduction) -> None:
        """extends : EXTENDS name_list"""
        p[0] = p[2]

    def p_extends_none(self, p: yacc.YaccProduction) -> None:
        """extends : empty"""
        p[0] = []

    def p_name_list_single(self, p: yacc.YaccProduction) -> None:
        """name_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_name_list_multiple(self, p: yacc.YaccProduction) -> None:
        """name_list : name_list COMMA IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_member_list_single(self, p: yacc.YaccProduction) -> None:
        """member_list : member"""
        p[0] = [p[1]]

    def p_member_list_multiple(self, p: yacc.YaccProduction) -> None:
        """member_list : member_list member"""
        p[0] = p[1] + [p[2]]

    def p_member(self, p: yacc.YaccProduction) -> None:
        """member : signature
                  | signature SEMICOLON"""
        p[0] = p[1]

    def p_signature_no_params(self, p: yacc.YaccProduction) -> None:
        """signature : IDENTIFIER LPAREN RPAREN returns"""
        p[0] = MethodSpec(name=p[1], params=[], returns=p[4])

    def p_signature_params(self, p: yacc.YaccProduction) -> None:
        """signature : IDENTIFIER LPAREN param_list RPAREN returns"""
        p[0] = MethodSpec(name=p[1], params=p[3], returns=p[5])

    def p_returns(self, p: yacc.YaccProduction) -> None:
        """returns : ARROW type_ref"""
        p[0] = p[2]

    def p_returns_none(self, p: yacc.YaccProduction) -> None:
        """returns : empty"""
        p[0] = None

    def p_param_list_single(self, p: yacc.YaccProduction) -> None:
        """param_list : param"""
        p[0] = [p[1]]

    def p_param_list_multiple(self, p: yacc.YaccProduction) -> None:
        """param_list : param_list COMMA param"""
        p[0] = p[1] + [p[3]]

    def p_param_unnamed(self, p: yacc.YaccProduction) -> None:
        """param : type_ref"""
        p[0] = ParamSpec(type_ref=p[1])

    def p_param_named(self, p: yacc.YaccProduction) -> None:
        """param : IDENTIFIER COLON type_ref"""
        p[0] = ParamSpec(type_ref=p[3], name=p[1])

    def p_type_ref_simple(self, p: yacc.YaccProduction) -> None:
        """type_ref : IDENTIFIER"""
        p[0] = TypeRef(name=p[1])

    def p_type_ref_array(self, p: yacc.YaccProduction) -> None:
        """type_ref : type_ref LBRACKET RBRACKET"""
        p[0] = TypeRef(name=p[1].name, modifiers=p[1].modifiers + (ARRAY_MODIFIER,))

    def p_type_ref_optional(self, p: yacc.YaccProduction) -> None:
        """type_ref : type_ref QUESTION"""
        p[0] = TypeRef(name=p[1].name, modifiers=p[1].modifiers + (OPTIONAL_MODIFIER,))

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse_specs(self, data: str) -> list[ContractSpec]:
        """Parse contract definitions into unresolved specs."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)
        self.lexer.lexer.lineno = 1
        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        if specs is None:
            specs = []
        return specs

    def parse(
        self,
        data: str,
        defaults: Mapping[str, Mapping[str, Callable[..., Any]]] | None = None,
        known_types: Mapping[str, Any] | None = None,
        module: str | None = None,
    ) -> dict[str, type]:
        """Parse contract definitions and create the contract classes.

        Args:
            data: DSL text.
            defaults: Default method bodies per contract name, as
                ``{contract: {method: function}}``. Each function takes the
                instance as its first argument.
            known_types: Extra type names (classes, other contracts) usable in
                signatures and ``extends`` clauses.
            module: Value for the ``__module__`` of the created classes.

        Returns:
            The created contract classes by name, in declaration order.

        Raises:
            SyntaxError: If the text is not valid DSL.
            ValueError: If names cannot be resolved or are defined twice.
        """
        specs = self.parse_specs(data)
        return ContractResolver(
            specs,
            defaults=defaults or {},
            known_types=known_types or {},
            module=module or __name__,
        ).resolve()


class ContractResolver:
    """Turns parsed contract specs into contract classes.

    Phase 1 creates the classes, each once all its parents exist, so parents
    may be declared after their children. Phase 2 resolves method
    signatures, which may refer to any contract of the same text.
    """

    def __init__(
        self,
        specs: list[ContractSpec],
        defaults: Mapping[str, Mapping[str, Callable[..., Any]]],
        known_types: Mapping[str, Any],
        module: str,
    ) -> None:
        self.specs = specs
        self.defaults = defaults
        self.known_types = known_types
        self.module = module
        self.contracts: dict[str, type] = {}

    def resolve(self) -> dict[str, type]:
        self._check_names()

        # Phase 1: create contract classes in dependency order
        unresolved = list(self.specs)
        max_iterations = len(unresolved) + 1
        for _ in range(max_iterations):
            if not unresolved:
                break

            still_unresolved: list[ContractSpec] = []
            progress = False

            for spec in unresolved:
                try:
                    bases = tuple(self._lookup_parent(name) for name in spec.parents)
                except KeyError:
                    # Parent not created yet
                    still_unresolved.append(spec)
                    continue
                self.contracts[spec.name] = self._create_contract(spec, bases)
                progress = True

            unresolved = still_unresolved

            if not progress and unresolved:
                remaining = [s.name for s in unresolved]
                raise ValueError(f"Cannot resolve contracts: {remaining}")

        # Phase 2: annotate the abstract methods
        type_names = {**BUILTIN_TYPES, **self.known_types, **self.contracts}
        for spec in self.specs:
            contract = self.contracts[spec.name]
            supplied = self.defaults.get(spec.name, {})
            for method in spec.methods:
                if method.name in supplied:
                    continue
                function = vars(contract)[method.name]
                function.__annotations__ = self._annotations(method, type_names)

        return {spec.name: self.contracts[spec.name] for spec in self.specs}

    def _check_names(self) -> None:
        seen: set[str] = set()
        for spec in self.specs:
            if spec.name in seen or spec.name in self.known_types:
                raise ValueError(f"Contract '{spec.name}' is already defined")
            seen.add(spec.name)
            method_names = [m.name for m in spec.methods]
            for name in method_names:
                if method_names.count(name) > 1:
                    raise ValueError(f"Method '{spec.name}.{name}' is declared twice")
        for contract_name in self.defaults:
            if contract_name not in seen:
                raise ValueError(f"Defaults given for unknown contract '{contract_name}'")

    def _lookup_parent(self, name: str) -> type:
        """Find a parent class; KeyError if it is declared but not created yet."""
        if name in self.contracts:
            return self.contracts[name]
        if any(spec.name == name for spec in self.specs):
            raise KeyError(name)
        parent = self.known_types.get(name)
        if not isinstance(parent, type):
            raise ValueError(f"Unknown parent contract '{name}'")
        return parent

    def _create_contract(self, spec: ContractSpec, bases: tuple[type, ...]) -> type:
        supplied = dict(self.defaults.get(spec.name, {}))
        namespace: dict[str, Any] = {"__module__": self.module, "__qualname__": spec.name}
        for method in spec.methods:
            if method.name in supplied:
                namespace[method.name] = supplied.pop(method.name)
            else:
                namespace[method.name] = _abstract_stub(spec.name, method)
        # Default methods not declared in the text
        namespace.update(supplied)

        if not any(issubclass(base, DynaBean) for base in bases):
            bases = bases + (DynaBean,)
        return type(spec.name, bases, namespace)

    def _annotations(self, method: MethodSpec, type_names: Mapping[str, Any]) -> dict[str, Any]:
        annotations: dict[str, Any] = {}
        for index, param in enumerate(method.params):
            annotations[param.name or _positional_name(index)] = _resolve_type_ref(
                param.type_ref, type_names
            )
        if method.returns is not None:
            annotations["return"] = _resolve_type_ref(method.returns, type_names)
        return annotations


def _positional_name(index: int) -> str:
    return f"arg{index}"


def _abstract_stub(contract_name: str, method: MethodSpec) -> Callable[..., Any]:
    """Create an abstract method with the declared parameter names."""

    def stub(self: Any, *args: Any, **kwargs: Any) -> Any:
        raise NotImplementedError(f"{contract_name}.{method.name} has no implementation")

    stub.__name__ = method.name
    stub.__qualname__ = f"{contract_name}.{method.name}"
    parameters = [inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    for index, param in enumerate(method.params):
        parameters.append(
            inspect.Parameter(
                param.name or _positional_name(index),
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
            )
        )
    stub.__signature__ = inspect.Signature(parameters)  # type: ignore[attr-defined]
    return abstractmethod(stub)


def _resolve_type_ref(type_ref: TypeRef, type_names: Mapping[str, Any]) -> Any:
    """Resolve a type reference to a class or typing construct."""
    if type_ref.name not in type_names:
        raise ValueError(f"Type '{type_ref.name}' not found")
    resolved = type_names[type_ref.name]
    for modifier in type_ref.modifiers:
        if modifier == ARRAY_MODIFIER:
            resolved = list[resolved]  # type: ignore[valid-type]
        else:
            resolved = typing.Optional[resolved]
    return resolved
