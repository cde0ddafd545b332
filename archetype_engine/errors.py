"""
Exception hierarchy for the archetype engine.

Input problems are never raised: they are reported through a ValidationResult.
The exceptions below cover broken preconditions and failures during generation
or persistence.
"""


class ArchetypeError(Exception):
    """Base class for every error raised by the engine."""


class ManifestLoadError(ArchetypeError):
    """A manifest file could not be read or parsed."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot load manifest '{self.path}': {reason}")


class ManifestCompileError(ArchetypeError):
    """The compiler was handed a manifest that does not pass validation."""

    def __init__(self, result):
        self.result = result
        codes = ", ".join(sorted({issue.code.value for issue in result.errors}))
        super().__init__(
            f"Manifest failed validation with {len(result.errors)} error(s): {codes}. "
            f"Run validate_manifest() and fix the reported errors before compiling."
        )


class TemplateNotFoundError(ArchetypeError):
    def __init__(self, template_id: str, available=()):
        self.template_id = template_id
        self.available = tuple(available)
        hint = f" Available: {', '.join(self.available)}" if self.available else ""
        super().__init__(f"Template '{template_id}' is not registered.{hint}")


class GeneratorError(ArchetypeError):
    """
    A generator failed or produced conflicting output.

    The files produced by the generators that ran before the failure are kept on
    `partial_files` so callers can inspect them; nothing has been written yet.
    """

    def __init__(self, generator_name: str, message: str, partial_files=()):
        self.generator_name = generator_name
        self.partial_files = list(partial_files)
        super().__init__(f"Generator '{generator_name}' failed: {message}")


class PersistenceError(ArchetypeError):
    """
    Writing a generated file failed.

    Files listed in `written` were persisted before the failure and are not
    rolled back.
    """

    def __init__(self, path: str, written=()):
        self.path = path
        self.written = list(written)
        super().__init__(
            f"Failed to write '{path}' ({len(self.written)} file(s) already written)"
        )
