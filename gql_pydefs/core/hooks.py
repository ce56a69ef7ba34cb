r"""Post-generation hooks for customizing the emitted definitions.

Hooks see the rendered module source before it is written. The
``additionalHeader`` option is applied by ``AddHeaderHook``, which always runs
after any user hooks.

Example usage:
    from gql_pydefs.core import DefinitionsEmitter

    class ExportAll:
        def post_generate(self, filename, content):
            names = re.findall(r"^class (\w+)", content, flags=re.M)
            return content + f"\n__all__ = {names!r}\n"

    emitter = DefinitionsEmitter(hooks=[ExportAll()])
"""

from typing import Protocol, runtime_checkable

FUTURE_IMPORT = "from __future__ import annotations\n"


@runtime_checkable
class PostGenerateHook(Protocol):
    """Protocol for post-generation hooks.

    Post-generation hooks receive the rendered definitions and can transform
    them before they are written to disk.
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Called after rendering, before the file is written.

        Args:
            filename: The output path of the definitions file
            content: The rendered code

        Returns:
            The (possibly transformed) code to write
        """
        ...


class AddHeaderHook:
    """Built-in hook that puts a header at the top of the generated code.

    The header lands right below ``from __future__ import annotations`` when
    the code has that line, since it must remain the first statement.

    Example:
        hook = AddHeaderHook("from my_app.scalars import Money")
    """

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _filename: str, content: str) -> str:
        """Add the header to the beginning of the file."""
        if not self.header.endswith("\n"):
            header = self.header + "\n\n"
        else:
            header = self.header + "\n"

        head, future_import, body = content.partition(FUTURE_IMPORT)
        if not future_import:
            return header + content
        return head + future_import + "\n" + header + body.lstrip("\n")


class HookRunner:
    """Runs a collection of post-generation hooks in order."""

    def __init__(self, hooks: list[PostGenerateHook] | None = None):
        self.post_hooks: list[PostGenerateHook] = list(hooks or [])

    def add_post_hook(self, hook: PostGenerateHook):
        """Add a post-generation hook."""
        self.post_hooks.append(hook)

    def run_post_hooks(self, filename: str, content: str) -> str:
        """Run all post-generation hooks in order."""
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
