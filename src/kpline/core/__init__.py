"""Core value model, line-protocol encoder and nowcast parser."""
