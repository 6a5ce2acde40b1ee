"""LibCST transformers for the @optimistic_locking rewrite."""

import logging
from collections.abc import Collection, Sequence
from typing import Optional, Union

import libcst as cst
from libcst.helpers import get_full_name_for_node
from libcst.metadata import Assignment, CodeRange, PositionProvider, Scope

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.domain.constants import INTERNAL_ERROR_PREFIX
from optimistic_guard.domain.params import tokenize_param_names
from optimistic_guard.domain.protocols import DiagnosticCollectorProtocol
from optimistic_guard.infrastructure.gateways.annotation_resolver import (
    AnnotationParameterResolver,
    decorator_name,
)
from optimistic_guard.infrastructure.gateways.recovery_builder import BlockWrapper, RecoveryBlockBuilder

logger = logging.getLogger(__name__)

GuardTarget = Union[cst.FunctionDef, cst.ClassDef]


def _is_docstring(stmt: cst.BaseStatement) -> bool:
    return (
        isinstance(stmt, cst.SimpleStatementLine)
        and len(stmt.body) == 1
        and isinstance(stmt.body[0], cst.Expr)
        and isinstance(stmt.body[0].value, (cst.SimpleString, cst.ConcatenatedString))
    )


def _describe(node: object) -> str:
    return type(node).__name__


def parameter_names(params: cst.Parameters) -> set[str]:
    """Every name a function signature binds, including *args and **kwargs."""
    names = {p.name.value for p in (*params.posonly_params, *params.params, *params.kwonly_params)}
    for star in (params.star_arg, params.star_kwarg):
        if isinstance(star, cst.Param):
            names.add(star.name.value)
    return names


def _imports_name_from(statement: cst.CSTNode, module: str, name: str) -> bool:
    if not isinstance(statement, cst.ImportFrom) or statement.relative or statement.module is None:
        return False
    if get_full_name_for_node(statement.module) != module or isinstance(statement.names, cst.ImportStar):
        return False
    return any(
        alias.asname is None and isinstance(alias.name, cst.Name) and alias.name.value == name
        for alias in statement.names
    )


def conflicting_bindings(scope: Scope, module: str, names: Sequence[str]) -> list[str]:
    """
    Names that 'from <module> import <name>' would rebind.

    A name is free when the scope never binds it, or binds it only by
    importing that same name from module.
    """
    conflicts = []
    for name in names:
        for assignment in scope.assignments[name]:
            if not (isinstance(assignment, Assignment) and _imports_name_from(assignment.node, module, name)):
                conflicts.append(name)
                break
    return conflicts


class OptimisticLockingTransform:
    """
    Rewrite one decorated function into its guarded form.

    transform() is pure: it returns a new node and leaves the input tree
    untouched. The caller substitutes the result for the original.
    """

    def __init__(self, config: Optional[GuardConfig] = None) -> None:
        self.config = config or GuardConfig()
        self.resolver = AnnotationParameterResolver()
        self.builder = RecoveryBlockBuilder(self.config)
        self.wrapper = BlockWrapper(self.config)

    def is_guard(self, decorator: cst.Decorator) -> bool:
        name = decorator_name(decorator)
        return name is not None and self.config.matches_decorator(name)

    def transform(
        self,
        annotation: cst.CSTNode,
        element: cst.CSTNode,
        collector: DiagnosticCollectorProtocol,
        position: Optional[CodeRange] = None,
        enclosing_names: Collection[str] = (),
    ) -> cst.CSTNode:
        # Unreachable through a well-formed decorator usage; report and leave the node alone.
        if not isinstance(annotation, cst.Decorator) or not isinstance(element, cst.FunctionDef):
            self._add_error(
                f"{INTERNAL_ERROR_PREFIX}: expecting [Decorator, FunctionDef] but got: "
                f"[{_describe(annotation)}, {_describe(element)}]",
                collector,
                position,
            )
            return element
        if not isinstance(element.body, cst.IndentedBlock):
            self._add_error(
                f"{INTERNAL_ERROR_PREFIX}: expecting an indented body for '{element.name.value}' "
                f"but got: {_describe(element.body)}",
                collector,
                position,
            )
            return element
        receiver = self.config.receiver
        if receiver not in parameter_names(element.params) and receiver not in enclosing_names:
            self._add_error(
                f"Cannot guard '{element.name.value}': receiver '{receiver}' is not a parameter "
                f"of the function or of an enclosing function",
                collector,
                position,
            )
            return element

        spec = self.resolver.resolve_spec(annotation)
        param_names = tokenize_param_names(spec.param_names_raw)
        recovery = self.builder.build(spec.redirect_action, spec.message_code, param_names)

        statements: Sequence[cst.BaseStatement] = element.body.body
        leading: list[cst.BaseStatement] = []
        if len(statements) > 1 and _is_docstring(statements[0]):
            leading, statements = [statements[0]], statements[1:]

        guarded = self.wrapper.wrap(statements, recovery, footer=element.body.footer)
        logger.debug(
            "Guarded '%s': redirect=%s message_code=%s params=%s",
            element.name.value,
            spec.redirect_action,
            spec.message_code,
            param_names,
        )
        return element.with_changes(
            decorators=[d for d in element.decorators if d is not annotation],
            body=element.body.with_changes(body=[*leading, guarded], footer=[]),
        )

    @staticmethod
    def _add_error(message: str, collector: DiagnosticCollectorProtocol, position: Optional[CodeRange]) -> None:
        if position is None:
            collector.add_error_and_continue(message)
        else:
            collector.add_error_and_continue(message, position.start.line, position.start.column + 1)


class GuardTransformer(cst.CSTTransformer):
    """Visit a module and rewrite every function carrying the guard decorator."""

    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(self, transform: OptimisticLockingTransform, collector: DiagnosticCollectorProtocol) -> None:
        super().__init__()
        self.transform = transform
        self.collector = collector
        self.rewritten: list[str] = []
        self._scope: list[str] = []
        # Parameter names of each enclosing function, innermost last
        self._bindings: list[set[str]] = []

    def _guards(self, node: GuardTarget) -> list[cst.Decorator]:
        return [d for d in node.decorators if self.transform.is_guard(d)]

    def _position(self, node: cst.CSTNode) -> Optional[CodeRange]:
        return self.get_metadata(PositionProvider, node, None)

    def visit_ClassDef(self, node: cst.ClassDef) -> None:
        self._scope.append(node.name.value)

    def leave_ClassDef(self, original_node: cst.ClassDef, updated_node: cst.ClassDef) -> cst.ClassDef:
        self._scope.pop()
        for guard in self._guards(updated_node):
            self.transform.transform(guard, updated_node, self.collector, self._position(original_node))
        return updated_node

    def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
        self._scope.append(node.name.value)
        self._bindings.append(parameter_names(node.params))

    def leave_FunctionDef(
        self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef
    ) -> cst.FunctionDef:
        qualified_name = ".".join(self._scope)
        self._scope.pop()
        self._bindings.pop()
        guards = self._guards(updated_node)
        if not guards:
            return updated_node

        position = self._position(original_node)
        enclosing_names = set().union(*self._bindings)
        result = self.transform.transform(
            guards[0], updated_node, self.collector, position, enclosing_names
        )
        if result is updated_node:
            return updated_node

        if len(guards) > 1:
            line = position.start.line if position else None
            self.collector.add_warning(
                f"Duplicate optimistic locking decorator on '{qualified_name}' ignored", line
            )
            result = result.with_changes(
                decorators=[d for d in result.decorators if not self.transform.is_guard(d)]
            )
        self.rewritten.append(qualified_name)
        return result


class AddImportTransformer(cst.CSTTransformer):
    """Add 'from <module> import <names>' for names the module does not import yet."""

    def __init__(self, context: dict) -> None:
        super().__init__()
        self.module = context.get("module")
        self.imports = context.get("imports", [])  # List[str]
        self.added = False

    def _existing_names(self, body: Sequence[cst.BaseStatement]) -> Optional[set[str]]:
        """Names imported from self.module at top level; None when it is star-imported."""
        names: set[str] = set()
        for stmt in body:
            if not isinstance(stmt, cst.SimpleStatementLine):
                continue
            for item in stmt.body:
                if not isinstance(item, cst.ImportFrom) or item.relative or item.module is None:
                    continue
                if get_full_name_for_node(item.module) != self.module:
                    continue
                if isinstance(item.names, cst.ImportStar):
                    return None
                for alias in item.names:
                    if alias.asname is None and isinstance(alias.name, cst.Name):
                        names.add(alias.name.value)
        return names

    @staticmethod
    def _insert_index(body: Sequence[cst.BaseStatement]) -> int:
        insert_idx: int = 0
        if body and _is_docstring(body[0]):
            insert_idx = 1
        for i, stmt in enumerate(body):
            if isinstance(stmt, cst.SimpleStatementLine) and any(
                isinstance(item, (cst.Import, cst.ImportFrom)) for item in stmt.body
            ):
                insert_idx = i + 1
        return insert_idx

    def _module_expr(self) -> cst.BaseExpression:
        # Support dotted module paths like "a.b.c"
        parts = self.module.split(".")
        module_expr: cst.BaseExpression = cst.Name(parts[0])
        for part in parts[1:]:
            module_expr = cst.Attribute(value=module_expr, attr=cst.Name(part))
        return module_expr

    def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
        if self.added or not self.module:
            return updated_node
        existing = self._existing_names(updated_node.body)
        if existing is None:
            return updated_node
        missing = [n for n in self.imports if n not in existing]
        if not missing:
            return updated_node

        import_stmt = cst.ImportFrom(
            module=self._module_expr(),
            names=[cst.ImportAlias(name=cst.Name(n)) for n in missing],
            whitespace_after_import=cst.SimpleWhitespace(" "),
        )
        new_body = list(updated_node.body)
        new_body.insert(self._insert_index(new_body), cst.SimpleStatementLine(body=[import_stmt]))
        self.added = True
        return updated_node.with_changes(body=new_body)
