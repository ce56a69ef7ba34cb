"""Definitions factory: runs the generation pipeline, once or in watch mode."""

from collections.abc import Callable
from logging import Logger

from .emitter import DefinitionsEmitter
from .errors import ConfigurationError
from .explorer import GraphQLAstExplorer
from .federation import FederationCapabilityProvider
from .loader import TypesLoader, extend_type_defs
from .normalizer import SchemaNormalizer
from .options import DefinitionsGeneratorOptions, GenerateOptions
from .watcher import ChangeSource, WatchDispatcher
from ..logging import get_logger


class DefinitionsFactory:
    """Generates Python definitions from GraphQL schema files.

    Example:
        factory = DefinitionsFactory()
        await factory.generate(
            GenerateOptions(type_paths=["./schema/*.graphql"], path="./definitions.py")
        )
    """

    def __init__(
        self,
        logger: Logger | None = None,
        federation_provider: FederationCapabilityProvider | None = None,
        change_source: ChangeSource | None = None,
        emitter: DefinitionsEmitter | None = None,
    ):
        self.logger = logger or get_logger("factory")
        self.federation_provider = federation_provider
        self.change_source = change_source
        self.types_loader = TypesLoader()
        self.explorer = GraphQLAstExplorer()
        self.emitter = emitter or DefinitionsEmitter()

    async def generate(
        self,
        options: GenerateOptions,
        on_error: Callable[[Exception], None] | None = None,
    ):
        """Generate definitions once, then keep them in sync in watch mode.

        Outside watch mode every failure propagates. In watch mode failures
        are passed to ``on_error`` (logged by default) and watching goes on.
        """
        if not options.type_paths:
            raise ConfigurationError('"typePaths" property cannot be empty.')

        normalizer = SchemaNormalizer(options.federation, self.federation_provider)
        normalizer.ensure_available()
        generator_options = options.generator_options()

        async def run_pass():
            await self.explore_and_emit(options, normalizer, generator_options)

        if not options.watch:
            await run_pass()
            return

        self.print_message("GraphQL factory is watching your files...", options.debug)
        dispatcher = WatchDispatcher(
            run_pass,
            options.type_paths,
            options.path,
            source=self.change_source,
            on_change=lambda path: self.print_message(
                f'"{path}" has been changed.', options.debug
            ),
            on_error=on_error,
            logger=self.logger,
        )
        try:
            await run_pass()
        except Exception as e:
            dispatcher.on_error(e)
        await dispatcher.run()

    async def explore_and_emit(
        self,
        options: GenerateOptions,
        normalizer: SchemaNormalizer,
        generator_options: DefinitionsGeneratorOptions,
    ) -> str:
        """Run one full pass: load, normalize, explore, emit."""
        type_path_defs = await self.types_loader.merge_types_by_paths(options.type_paths)
        merged_type_defs = extend_type_defs(type_path_defs, options.type_defs)
        if not merged_type_defs or not merged_type_defs.strip():
            raise ConfigurationError('"typeDefs" property cannot be null.')

        canonical_sdl = await normalizer.normalize(merged_type_defs)
        document = self.explorer.explore(canonical_sdl, generator_options)
        content = await self.emitter.emit(document, options.path, generator_options)

        self.print_message("The definitions have been updated.", options.debug)
        return content

    def print_message(self, text: str, is_enabled: bool):
        if is_enabled:
            self.logger.info(text)
