"""CSV -> table conversion engine (lexing, splitting, normalizing, classifying)."""
