"""Image selection: glob expansion plus random / newest picks."""
