"""
Core engine.

This package contains the stateful components. The `AudioOrchestrator` is the
composition root; it wires the `SettingsStore` and `TrackCatalog` to the
`PlaybackController` (music) and the `AlertLifecycleManager` (combat alerts).
"""
