"""Domain layer: pure model, import stages and persistence ports."""
