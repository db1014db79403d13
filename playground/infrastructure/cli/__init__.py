"""Command-line presentation: console rendering and the toy parser backends."""
