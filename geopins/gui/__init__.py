"""Qt layers, overlays, gestures and the annotated map widget."""
