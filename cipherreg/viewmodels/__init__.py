"""ViewModel package for UI state and command surfaces.

Call context:
    ``cipherreg/app/runtime.py`` composes these viewmodels and hands them to
    the lifecycle orchestrator, which is their only writer.

Dependencies:
    Modules in this package depend on domain types and lightweight formatting
    helpers only. I/O adapters and use-case orchestration remain outside.

Responsibilities:
    - Expose banner, activity-log and list state for presentation.
    - Derive filtered lists and statistics from the current case snapshot.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""
