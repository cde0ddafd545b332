"""
Unit tests for pipeline logging.
"""

import logging
import re

import pytest

from archetype_engine.gen_logging import (
    GenerationFormatter,
    configure_gen_logging,
    current_generator,
    generator_scope,
    get_logger,
)
from archetype_engine.ir import compile_manifest
from archetype_engine.template import (
    GeneratedFile,
    Generator,
    Template,
    TemplateConfig,
    TemplateMetadata,
    run_template,
)


def _record(message, level=logging.DEBUG):
    return logging.LogRecord("archetype.gen.services", level, __file__, 1, message, None, None)


@pytest.fixture
def clean_gen_logger():
    """Remove handlers added by configure_gen_logging."""
    yield logging.getLogger("archetype.gen")
    logger = logging.getLogger("archetype.gen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestGetLogger:
    """Test logger naming."""

    def test_module_names_are_shortened(self):
        """Test module loggers hang off archetype.gen by their last name."""
        assert get_logger("archetype_engine.template.runner").name == "archetype.gen.runner"
        assert get_logger().name == "archetype.gen"


class TestGenerationFormatter:
    """Test how pipeline records are rendered."""

    def test_outside_a_generator(self):
        """Test records logged outside a generator are left as written."""
        assert GenerationFormatter().format(_record("[1/3] service-layer (services)")) == "[1/3] service-layer (services)"

    def test_generator_tag(self):
        """Test records logged inside a generator are tagged with its name."""
        with generator_scope("service-layer"):
            line = GenerationFormatter().format(_record("    services/item.py (memory)"))
        assert line == "service-layer | services/item.py (memory)"

    def test_warning_names_its_generator(self):
        """Test warnings carry the level and the generator that raised them."""
        with generator_scope("sqlalchemy-models"):
            line = GenerationFormatter().format(_record("No database configured", logging.WARNING))
        assert line == "[WARNING] sqlalchemy-models | No database configured"

    def test_timed_lines(self):
        """Test verbose lines start with the seconds since logging was configured."""
        line = GenerationFormatter(timed=True).format(_record("mode: full"))
        assert re.match(r"^\s*\d+\.\d{3}s mode: full$", line)


class TestGeneratorScope:
    """Test the generator tag follows the running generator."""

    def test_scope_is_restored(self):
        """Test nested scopes restore the outer name on exit."""
        assert current_generator() is None
        with generator_scope("outer"):
            with generator_scope("inner"):
                assert current_generator() == "inner"
            assert current_generator() == "outer"
        assert current_generator() is None

    def test_runner_sets_scope(self):
        """Test each generator runs inside a scope named after it."""
        seen = []

        def record(ir, ctx):
            seen.append(current_generator())
            return GeneratedFile(path=f"{current_generator()}.py", content="x = 1\n")

        template = Template(
            metadata=TemplateMetadata(id="scoped", name="Scoped", description="Scope test template"),
            default_config=TemplateConfig(),
            generators=(Generator("first", "api", "", record), Generator("second", "api", "", record)),
            post_generate=lambda ir, ctx, files: seen.append(current_generator()) or [],
        )
        ir = compile_manifest({
            "mode": {"type": "headless", "include": ["api"]},
            "entities": [{"name": "Item", "fields": {"title": {"type": "text"}}}],
        })
        run_template(template, ir, dry_run=True)
        assert seen == ["first", "second", "post_generate"]
        assert current_generator() is None


class TestConfigureGenLogging:
    """Test CLI logging configuration."""

    def test_levels(self, clean_gen_logger):
        """Test verbose and quiet select DEBUG and WARNING."""
        configure_gen_logging(verbose=True)
        assert clean_gen_logger.level == logging.DEBUG
        configure_gen_logging(quiet=True)
        assert clean_gen_logger.level == logging.WARNING

    def test_reconfigure_keeps_one_handler(self, clean_gen_logger):
        """Test calling again swaps the formatter instead of stacking handlers."""
        configure_gen_logging()
        configure_gen_logging(verbose=True)
        assert len(clean_gen_logger.handlers) == 1
        assert clean_gen_logger.handlers[0].formatter.timed
        assert not clean_gen_logger.propagate
