"""ViewModel package for UI state and command surfaces.

Call context:
    ``geospoof/app/controller.py`` builds concrete view models from this
    package and ``geospoof/app/main.py`` binds view callbacks to them.

Dependencies:
    Modules in this package depend on domain types, use cases, and the
    observable/scheduler helpers in ``geospoof.utils``. I/O adapters are
    injected through ports.

Responsibilities:
    - Expose observable UI state and command callbacks.
    - Project the spoofing session and bookmark store into view-facing text.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""
