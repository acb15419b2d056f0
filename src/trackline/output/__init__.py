"""Output layer — Rich console rendering, JSON formatting, SVG drawing."""
