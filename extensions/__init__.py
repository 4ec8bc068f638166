"""Bundled extensions, loaded by file path by ``extension_manager``."""
