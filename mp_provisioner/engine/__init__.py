"""Engine primitives: detection, registry, rendering, unit updates, waiting."""
