"""
Bundled analyzers.

Each module exposes one ``async def analyze_*(target_dir)`` returning a
Category. Modules are located by stem through the runner, so a plugin
directory can override any of them by providing a file with the same name.
"""
