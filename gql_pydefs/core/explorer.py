"""GraphQL AST explorer.

Parses canonical SDL and synthesizes the declaration IR, one declaration per
named type, in definition order.
"""

from graphql import (
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    OperationType,
    ScalarTypeDefinitionNode,
    ScalarTypeExtensionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    StringValueNode,
    TypeNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
    parse,
    value_from_ast_untyped,
)

from .ir import (
    DeclarationKind,
    IRArgument,
    IRDeclaration,
    IRDocument,
    IREnumValue,
    IRMember,
    IRTypeExpr,
)
from .options import DefinitionsGeneratorOptions
from .scalars import ScalarRegistry

TYPENAME_FIELD = "__typename"

DEFAULT_ROOT_TYPES = {
    OperationType.QUERY: "Query",
    OperationType.MUTATION: "Mutation",
    OperationType.SUBSCRIPTION: "Subscription",
}

NODE_KINDS = {
    ObjectTypeDefinitionNode: DeclarationKind.OBJECT,
    ObjectTypeExtensionNode: DeclarationKind.OBJECT,
    InterfaceTypeDefinitionNode: DeclarationKind.INTERFACE,
    InterfaceTypeExtensionNode: DeclarationKind.INTERFACE,
    InputObjectTypeDefinitionNode: DeclarationKind.INPUT,
    InputObjectTypeExtensionNode: DeclarationKind.INPUT,
    EnumTypeDefinitionNode: DeclarationKind.ENUM,
    EnumTypeExtensionNode: DeclarationKind.ENUM,
    UnionTypeDefinitionNode: DeclarationKind.UNION,
    UnionTypeExtensionNode: DeclarationKind.UNION,
    ScalarTypeDefinitionNode: DeclarationKind.SCALAR,
    ScalarTypeExtensionNode: DeclarationKind.SCALAR,
}


def _description(node) -> str | None:
    description = getattr(node, "description", None)
    return description.value if description else None


class GraphQLAstExplorer:
    """Turns a schema document into the declaration IR."""

    def __init__(self, options: DefinitionsGeneratorOptions | None = None):
        """Initialize an explorer with default generation options."""
        self.options = options or DefinitionsGeneratorOptions()
        self.ir = IRDocument()
        self.scalars = ScalarRegistry()
        self.root_types: set[str] = set()
        self.kinds: dict[str, DeclarationKind] = {}

    def explore(
        self,
        document: DocumentNode | str,
        options: DefinitionsGeneratorOptions | None = None,
    ) -> IRDocument:
        """Explore a parsed (or raw SDL) schema document and return the IR."""
        if isinstance(document, str):
            document = parse(document)
        options = options or self.options

        self.options = options
        self.ir = IRDocument()
        self.scalars = ScalarRegistry(
            custom_scalar_type_mapping=options.custom_scalar_type_mapping,
            default_type_mapping=options.default_type_mapping,
            default_scalar_type=options.default_scalar_type,
        )
        self.root_types = self._collect_root_types(document)
        self.kinds = {
            definition.name.value: NODE_KINDS[type(definition)]
            for definition in document.definitions
            if type(definition) in NODE_KINDS
        }

        for definition in document.definitions:
            self._process_definition(definition)
        return self.ir

    @staticmethod
    def _collect_root_types(document: DocumentNode) -> set[str]:
        """Return the root operation type names, honouring a schema definition."""
        roots = dict(DEFAULT_ROOT_TYPES)
        for definition in document.definitions:
            if isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
                for operation_type in definition.operation_types or ():
                    roots[operation_type.operation] = operation_type.type.name.value
        return set(roots.values())

    def _process_definition(self, node):
        kind = NODE_KINDS.get(type(node))
        if kind is None:
            # Schema and directive definitions produce no declaration
            return

        existing = self.ir.get(node.name.value)
        if existing is not None:
            self._merge_extension(existing, node)
            return

        if kind in (DeclarationKind.OBJECT, DeclarationKind.INTERFACE, DeclarationKind.INPUT):
            declaration = self._process_object_like(node, kind)
        elif kind == DeclarationKind.ENUM:
            declaration = self._process_enum(node)
        elif kind == DeclarationKind.UNION:
            declaration = self._process_union(node)
        else:
            declaration = self._process_scalar(node)
        self.ir.declarations.append(declaration)

    def _process_object_like(self, node, kind: DeclarationKind) -> IRDeclaration:
        name = node.name.value
        is_root = kind == DeclarationKind.OBJECT and name in self.root_types
        declaration = IRDeclaration(
            name=name,
            kind=kind,
            output_as=self.options.output_as,
            interfaces=[i.name.value for i in getattr(node, "interfaces", None) or ()],
            entity_keys=self._entity_keys(node),
            description=_description(node),
            is_root=is_root,
        )
        if (
            self.options.emit_typename_field
            and kind == DeclarationKind.OBJECT
            and not is_root
        ):
            declaration.members.append(self._typename_member(name))
        declaration.members.extend(self._process_fields(node.fields or (), declaration))
        return declaration

    def _process_enum(self, node) -> IRDeclaration:
        return IRDeclaration(
            name=node.name.value,
            kind=DeclarationKind.ENUM,
            output_as=self.options.output_as,
            values=self._enum_values(node),
            description=_description(node),
            literal_union=self.options.enums_as_types,
        )

    def _process_union(self, node) -> IRDeclaration:
        return IRDeclaration(
            name=node.name.value,
            kind=DeclarationKind.UNION,
            output_as=self.options.output_as,
            union_types=[t.name.value for t in node.types or ()],
            description=_description(node),
        )

    def _process_scalar(self, node) -> IRDeclaration:
        name = node.name.value
        target = self.scalars.resolve(name)
        if target.import_statement:
            self.ir.imports.add(target.import_statement)
        return IRDeclaration(
            name=name,
            kind=DeclarationKind.SCALAR,
            output_as=self.options.output_as,
            scalar_type=target.python_type,
            description=_description(node),
        )

    def _merge_extension(self, declaration: IRDeclaration, node):
        """Merge an extension (or repeated definition) into a declaration."""
        if declaration.kind in (
            DeclarationKind.OBJECT,
            DeclarationKind.INTERFACE,
            DeclarationKind.INPUT,
        ):
            existing_names = {m.name for m in declaration.members}
            for member in self._process_fields(node.fields or (), declaration):
                if member.name not in existing_names:
                    declaration.members.append(member)
                    existing_names.add(member.name)
            for interface in getattr(node, "interfaces", None) or ():
                if interface.name.value not in declaration.interfaces:
                    declaration.interfaces.append(interface.name.value)
            declaration.entity_keys.extend(
                key for key in self._entity_keys(node) if key not in declaration.entity_keys
            )
        elif declaration.kind == DeclarationKind.ENUM:
            existing_names = {v.name for v in declaration.values}
            declaration.values.extend(
                v for v in self._enum_values(node) if v.name not in existing_names
            )
        elif declaration.kind == DeclarationKind.UNION:
            for type_node in node.types or ():
                if type_node.name.value not in declaration.union_types:
                    declaration.union_types.append(type_node.name.value)

    def _process_fields(self, field_nodes, declaration: IRDeclaration) -> list[IRMember]:
        """Process field (or input value) definitions into members."""
        skip_args = self.options.skip_resolver_args or declaration.kind == DeclarationKind.INPUT
        members = []
        for node in field_nodes:
            arguments = [] if skip_args else self._process_arguments(node)
            is_method = not skip_args and (declaration.is_root or bool(arguments))
            members.append(
                IRMember(
                    name=node.name.value,
                    type=self._get_type_expr(node.type),
                    arguments=arguments,
                    is_method=is_method,
                    default_value=self._default_value(node),
                    description=_description(node),
                )
            )
        return members

    def _process_arguments(self, node) -> list[IRArgument]:
        args = []
        for arg_node in getattr(node, "arguments", None) or ():
            type_expr = self._get_type_expr(arg_node.type)
            default_value = self._default_value(arg_node)
            args.append(
                IRArgument(
                    name=arg_node.name.value,
                    type=type_expr,
                    is_optional=type_expr.nullable or arg_node.default_value is not None,
                    default_value=default_value,
                    description=_description(arg_node),
                )
            )
        return args

    @staticmethod
    def _default_value(node):
        value_node = getattr(node, "default_value", None)
        if value_node is None:
            return None
        return value_from_ast_untyped(value_node)

    @staticmethod
    def _enum_values(node) -> list[IREnumValue]:
        return [
            IREnumValue(name=v.name.value, description=_description(v))
            for v in node.values or ()
        ]

    @staticmethod
    def _entity_keys(node) -> list[str]:
        """Collect the field sets of federation @key directives."""
        keys = []
        for directive in node.directives or ():
            if directive.name.value != "key":
                continue
            for argument in directive.arguments or ():
                if argument.name.value == "fields" and isinstance(argument.value, StringValueNode):
                    keys.append(argument.value.value)
        return keys

    @staticmethod
    def _typename_member(type_name: str) -> IRMember:
        return IRMember(
            name=TYPENAME_FIELD,
            type=IRTypeExpr(
                graphql_name="String",
                target="str",
                nullable=False,
                literal=type_name,
            ),
            literal=type_name,
        )

    def _get_type_expr(self, type_node: TypeNode) -> IRTypeExpr:
        """Map a GraphQL type node onto a Python type expression."""
        nullable = True
        item_nullable = []

        # NonNull wrapper means not nullable
        if isinstance(type_node, NonNullTypeNode):
            nullable = False
            type_node = type_node.type

        # Each list level records whether its items may be null
        while isinstance(type_node, ListTypeNode):
            type_node = type_node.type
            if isinstance(type_node, NonNullTypeNode):
                item_nullable.append(False)
                type_node = type_node.type
            else:
                item_nullable.append(True)

        assert isinstance(type_node, NamedTypeNode), f"Expected NamedTypeNode, got {type(type_node)}"

        name = type_node.name.value
        target, is_reference = self._target_for(name)
        return IRTypeExpr(
            graphql_name=name,
            target=target,
            nullable=nullable,
            list_depth=len(item_nullable),
            item_nullable=item_nullable,
            is_reference=is_reference,
        )

    def _target_for(self, name: str) -> tuple[str, bool]:
        """Resolve the Python type a named GraphQL type maps to.

        The flag is true when the target is another declaration.
        """
        target = self.scalars.get(name)
        if target is None:
            kind = self.kinds.get(name)
            if kind is not None and kind != DeclarationKind.SCALAR:
                return name, True
            target = self.scalars.default
        if target.import_statement:
            self.ir.imports.add(target.import_statement)
        return target.python_type, False
