"""Definitions emitter.

Renders the declaration IR to a Python module with Jinja2 templates and writes
it to disk atomically.

Supports custom templates via the template_dir parameter:
    emitter = DefinitionsEmitter(template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import asyncio
import contextlib
import os
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader

from .errors import PersistenceError, RenderError
from .hooks import AddHeaderHook, HookRunner, PostGenerateHook
from .ir import DeclarationKind, IRArgument, IRDeclaration, IRDocument, IRMember, IRTypeExpr
from .options import DefinitionsGeneratorOptions

OBJECT_LIKE = (DeclarationKind.OBJECT, DeclarationKind.INTERFACE, DeclarationKind.INPUT)

# Builtins a scalar can map to; reached through ``builtins`` when shadowed
BUILTIN_TYPES = {"str", "int", "float", "bool"}

_FROM_IMPORT = re.compile(r"^from ([\w.]+) import (\w+)$")


class LocalNames:
    """Resolves the names the generated module binds for what it imports.

    A declaration may share its name with an imported helper (``type List``,
    ``scalar Any``). Such a helper is imported under a leading-underscore
    alias, and a shadowed builtin is reached through ``_builtins``.
    """

    def __init__(self, declared: Iterable[str] = ()):
        self.declared = set(declared)

    def __call__(self, name: str) -> str:
        if name not in self.declared:
            return name
        if name in BUILTIN_TYPES:
            return f"_builtins.{name}"
        return f"_{name}"

    def imported(self, name: str) -> str:
        """Return the import clause that binds ``name``."""
        if name in self.declared:
            return f"{name} as _{name}"
        return name

    @property
    def shadows_builtins(self) -> bool:
        return bool(self.declared & BUILTIN_TYPES)


def type_hint(expr: IRTypeExpr, names: LocalNames | None = None) -> str:
    """Render a type expression as a Python annotation."""
    names = names or LocalNames()
    if expr.literal is not None:
        hint = f"{names('Literal')}[{quote(expr.literal)}]"
    elif expr.is_reference:
        hint = expr.target
    else:
        hint = names(expr.target)
    for item_nullable in reversed(expr.item_nullable):
        if item_nullable:
            hint = f"{names('Optional')}[{hint}]"
        hint = f"{names('List')}[{hint}]"
    if expr.nullable:
        hint = f"{names('Optional')}[{hint}]"
    return hint


def argument_default(argument: IRArgument) -> str | None:
    if argument.default_value is not None:
        return repr(argument.default_value)
    if argument.is_optional:
        return "None"
    return None


def signature(member: IRMember, names: LocalNames | None = None) -> str:
    """Render the parameter list of a resolver method.

    Arguments are keyword-only so they keep their schema order whether or not
    they have defaults.
    """
    params = ["self"]
    if member.arguments:
        params.append("*")
    for argument in member.arguments:
        param = f"{argument.python_name}: {type_hint(argument.type, names)}"
        default = argument_default(argument)
        if default is not None:
            param += f" = {default}"
        params.append(param)
    return ", ".join(params)


def safe_docstring(text: str) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str) -> str:
    """Make text safe for a single-line Python comment."""
    if not text:
        return ""
    text = text.replace("\n", " ").replace("\r", "")
    text = re.sub(r"\s+", " ", text)
    if len(text) > 120:
        text = text[:117] + "..."
    return text.strip()


def quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def is_model(declaration: IRDeclaration) -> bool:
    """True for declarations rendered as pydantic models."""
    return (
        declaration.kind in OBJECT_LIKE
        and declaration.output_as == "class"
        and not declaration.is_root
    )


def base_kind(declaration: IRDeclaration) -> str:
    """Name of the helper class a class declaration derives from."""
    if declaration.kind == DeclarationKind.ENUM:
        return "Enum"
    if declaration.output_as == "interface":
        return "Protocol"
    if declaration.is_root:
        return "ABC"
    return "BaseModel"


def base_classes(declaration: IRDeclaration, names: LocalNames | None = None) -> str:
    names = names or LocalNames()
    base = names(base_kind(declaration))
    if declaration.kind == DeclarationKind.ENUM:
        return f"{names('str')}, {base}"
    return base


def member_default(
    member: IRMember, declaration: IRDeclaration, names: LocalNames | None = None
) -> str | None:
    """Render the right-hand side of a pydantic field, if it needs one."""
    if not is_model(declaration):
        return None
    if member.literal is not None:
        default = quote(member.literal)
    elif member.default_value is not None:
        default = repr(member.default_value)
    elif member.type.nullable:
        default = "None"
    else:
        default = None

    if member.needs_alias:
        field = (names or LocalNames())("Field")
        return f"{field}({default or '...'}, alias={quote(member.name)})"
    return default


def collect_imports(document: IRDocument, names: LocalNames | None = None) -> list[str]:
    """Return the import lines the rendered module needs."""
    names = names or LocalNames(document.names)
    typing_names: set[str] = set()
    other_imports: set[str] = set()
    needs = set()

    for statement in document.imports:
        match = _FROM_IMPORT.match(statement)
        if match and match.group(1) == "typing":
            typing_names.add(match.group(2))
        elif match:
            other_imports.add(f"from {match.group(1)} import {names.imported(match.group(2))}")
        else:
            other_imports.add(statement)

    def add_expr(expr: IRTypeExpr):
        if expr.nullable or any(expr.item_nullable):
            typing_names.add("Optional")
        if expr.list_depth:
            typing_names.add("List")
        if expr.literal is not None:
            typing_names.add("Literal")

    for declaration in document.declarations:
        if declaration.kind == DeclarationKind.ENUM:
            if declaration.literal_union:
                typing_names.add("Literal")
            else:
                needs.add("enum")
        elif declaration.kind == DeclarationKind.UNION:
            typing_names.add("Union")
        elif declaration.kind in OBJECT_LIKE:
            base = base_kind(declaration)
            if base == "Protocol":
                typing_names.add("Protocol")
            elif base == "ABC":
                needs.add("abc")
            else:
                needs.add("pydantic")
            for member in declaration.members:
                add_expr(member.type)
                if is_model(declaration) and member.needs_alias:
                    needs.add("pydantic.Field")
                for argument in member.arguments:
                    add_expr(argument.type)

    def from_import(module: str, imported: Iterable[str]) -> str:
        return f"from {module} import {', '.join(names.imported(n) for n in imported)}"

    lines = []
    if names.shadows_builtins:
        lines.append("import builtins as _builtins")
    if "abc" in needs:
        lines.append(from_import("abc", ["ABC", "abstractmethod"]))
    if "enum" in needs:
        lines.append(from_import("enum", ["Enum"]))
    if typing_names:
        lines.append(from_import("typing", sorted(typing_names)))
    lines.extend(sorted(other_imports))
    if "pydantic" in needs:
        pydantic_names = ["BaseModel"]
        if "pydantic.Field" in needs:
            pydantic_names += ["ConfigDict", "Field"]
        lines.append(from_import("pydantic", pydantic_names))
    return lines


def write_atomic(path: str | os.PathLike, content: str):
    """Write ``content`` to ``path`` so readers never see a partial file."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
    except OSError as e:
        raise PersistenceError(str(target), str(e)) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, target)
    except BaseException as e:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_path)
        if isinstance(e, OSError):
            raise PersistenceError(str(target), str(e)) from e
        raise


class DefinitionsEmitter:
    """Serializes the declaration IR and writes it to the output path.

    Supports custom templates via the template_dir parameter. A
    ``definitions.py.j2`` in template_dir takes precedence over the built-in
    template.
    """

    TEMPLATE = "definitions.py.j2"

    def __init__(
        self,
        template_dir: str | None = None,
        hooks: list[PostGenerateHook] | None = None,
    ):
        """Initialize the emitter.

        Args:
            template_dir: Optional directory with custom Jinja2 templates.
            hooks: Post-generation hooks applied before the header is added.
        """
        self.template_dir = template_dir
        self.hooks = list(hooks or [])

        # Build template loader - custom templates take precedence
        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_pydefs", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["type_hint"] = type_hint
        self.env.filters["signature"] = signature
        self.env.filters["safe_docstring"] = safe_docstring
        self.env.filters["safe_comment"] = safe_comment
        self.env.filters["quote"] = quote
        self.env.filters["repr"] = repr
        self.env.globals["base_classes"] = base_classes
        self.env.globals["member_default"] = member_default
        self.env.globals["is_model"] = is_model

    def render(
        self,
        document: IRDocument,
        options: DefinitionsGeneratorOptions | None = None,
        filename: str = "",
    ) -> str:
        """Render the IR to Python source, header included."""
        options = options or DefinitionsGeneratorOptions()
        names = LocalNames(document.names)
        template = self.env.get_template(self.TEMPLATE)
        content = template.render(
            declarations=document.declarations,
            imports=collect_imports(document, names),
            names=names,
        )

        runner = HookRunner(self.hooks)
        if options.additional_header:
            runner.add_post_hook(AddHeaderHook(options.additional_header))
        content = runner.run_post_hooks(filename, content)

        # Validate the final text, header included
        try:
            compile(content, filename or "<definitions>", "exec", dont_inherit=True)
        except (SyntaxError, ValueError) as e:
            raise RenderError(
                f"Generated invalid Python for {filename or 'definitions'}: {e}\n"
                f"Template: {self.TEMPLATE}"
            ) from e
        return content

    async def save(self, path: str, content: str):
        """Persist rendered content, replacing any previous file."""
        await asyncio.to_thread(write_atomic, path, content)

    async def emit(
        self,
        document: IRDocument,
        path: str,
        options: DefinitionsGeneratorOptions | None = None,
    ) -> str:
        """Render and save; returns the written content."""
        content = self.render(document, options, filename=path)
        await self.save(path, content)
        return content
