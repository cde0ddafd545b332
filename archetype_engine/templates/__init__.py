"""Built-in templates. Each subpackage exposes a module-level TEMPLATE."""
