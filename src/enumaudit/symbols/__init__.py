"""Abstract symbol model and the YAML symbol-graph provider."""
